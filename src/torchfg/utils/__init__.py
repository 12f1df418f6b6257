from .misc import DEVICE, DEFAULT_DTYPE, as_tensor

__all__ = [
    "DEVICE",
    "DEFAULT_DTYPE",
    "as_tensor"
]
