"""panehub 配置

配置分为以下几类：
- Pane 树配置：分屏上限、比例范围
- Tab 配置：默认标签、只读 tab 颜色
- Agent 配置：agent 启动命令识别
- 持久化配置：session 文件位置、版本
- 服务配置：监听地址、端口
- 日志配置
"""

import os
from pathlib import Path

# === Pane 树配置 ===
MAX_PANES = 4  # 单个 tab 的 pane 上限（超过则拒绝 split）
DEFAULT_SPLIT_RATIO = 0.5  # 新建 split 的初始比例
MIN_SPLIT_RATIO = 0.1  # 比例下限
MAX_SPLIT_RATIO = 0.9  # 比例上限

# === Tab 配置 ===
DEFAULT_TAB_LABEL = "Terminal"  # 默认标签前缀，实际为 "Terminal N"
DUPLICATE_LABEL_PREFIX = "Copy of "  # 复制 tab 的标签前缀
VIEW_ONLY_TAB_COLOR = "#fab387"  # 只读（外部 session）tab 颜色

# === Agent 配置 ===
# 完全匹配，或包含 "claude " 前缀形式（如 "claude --resume"）
AGENT_COMMAND = "claude"

# === 持久化配置 ===
PERSIST_DIR = Path(os.environ.get("PANEHUB_HOME", Path.home() / ".panehub"))
PERSIST_FILE = PERSIST_DIR / "session.json"
PERSIST_VERSION = 1

# === 服务配置 ===
SERVER_HOST = os.environ.get("PANEHUB_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("PANEHUB_PORT", "8765"))

# === 预览配置 ===
PREVIEW_WIDTH = 60  # 预览字符宽度
PREVIEW_HEIGHT = 20  # 预览字符高度

# === 日志配置 ===
LOG_LEVEL = os.environ.get("PANEHUB_LOG_LEVEL", "INFO")  # 日志级别
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
