"""应用常量定义."""

from pathlib import Path

# ===================
# 应用信息
# ===================
APP_NAME = "商品图片保真度校验工具"
APP_VERSION = "1.0.0"

# ===================
# 路径常量
# ===================
# 应用数据目录
APP_DATA_DIR = Path.home() / ".product-fidelity"

# 日志目录
LOG_DIR = APP_DATA_DIR / "logs"

# ===================
# 像素与指标常量
# ===================
# 8 位通道最大值
MAX_PIXEL_VALUE = 255

# 参与比较的颜色通道数 (R, G, B)，alpha 不参与
COLOR_CHANNELS = 3

# PSNR 分母的极小量，避免 MSE 为 0 时出现无穷大
PSNR_EPSILON = 1e-12

# 遮罩像素大于该值视为商品区域
MASK_IN_REGION_LEVEL = 128

# ===================
# 默认阈值
# ===================
DEFAULT_MIN_PSNR = 30.0  # 越高越严格
DEFAULT_MAX_MSE = 200.0  # 越低越严格
DEFAULT_MAX_COLOR_DELTA = 6.0  # 亮度均值差，非 CIE Delta-E

# ===================
# 对齐设置
# ===================
DEFAULT_WORKING_WIDTH = 512
MIN_WORKING_WIDTH = 16
MAX_WORKING_WIDTH = 4096

# ===================
# 并发设置
# ===================
DEFAULT_CONCURRENT_LIMIT = 4
MAX_CONCURRENT_LIMIT = 16

# 最大图片文件大小 (50MB)
MAX_IMAGE_FILE_SIZE = 50 * 1024 * 1024


class MaskResample:
    """遮罩缩放重采样方式."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"


class MaskSourceChannel:
    """遮罩取值通道."""

    LUMINANCE = "luminance"
    ALPHA = "alpha"
