"""Render 模块 - tab 布局预览"""

from .preview import LayoutPreview

__all__ = ["LayoutPreview"]
