"""python -m panehub"""

from panehub.web.app import main

if __name__ == "__main__":
    main()
