"""商品图片保真度校验工具."""

from product_fidelity.utils.constants import APP_VERSION

__version__ = APP_VERSION
