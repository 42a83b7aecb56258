"""
constants.py — Constants used across the chianti layer builder

This module contains the layer defaults, the padding vocabularies, device
names and exit codes used throughout the layers, the parameter resolver and
the engine bridge.
"""

# ============================================================================
# Conv2D Defaults
# ============================================================================

DEFAULT_NUM_FILTERS = 1
DEFAULT_FILTER_SIZE = (3, 3)
DEFAULT_CONV_PAD = 'same'
DEFAULT_CONV_STRIDE = (1, 1)

# ============================================================================
# Pool2D / Upscale2D Defaults
# ============================================================================

DEFAULT_POOL_SIZE = (2, 2)
DEFAULT_POOL_PAD = 'auto'
DEFAULT_POOL_STRIDE = (2, 2)
DEFAULT_SCALE_FACTOR = (2, 2)

# ============================================================================
# Non-deterministic Layer Defaults
# ============================================================================

DEFAULT_DETERMINISTIC = False
DEFAULT_DROPOUT_RATE = 0.25
DEFAULT_USE_CUDNN = False
DEFAULT_NORMALIZATION_TIME_CONSTANT = 5000.0
DEFAULT_BLEND_TIME_CONSTANT = 0.0
DEFAULT_BATCH_NORM_EPSILON = 1e-5

# ============================================================================
# Padding Vocabularies
# ============================================================================

PAD_SAME = 'same'
PAD_FULL = 'full'
PAD_VALID = 'valid'
PAD_AUTO = 'auto'
PAD_NONE = 'none'

# ============================================================================
# Error Messages
# ============================================================================

MSG_ILLEGAL_CONV_PAD = "Illegal string value for parameter 'pad'."
MSG_ILLEGAL_POOL_PAD = "Invalid string value for pad."
MSG_ILLEGAL_BIAS_SHAPE = "Bias must have shape (1, 1, numFilters)."
ILLEGAL_STATE_PREFIX = "Illegal system state reached: "

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_ILLEGAL_COMPOSITE_VALUE_2 = 0x1001
EXIT_ILLEGAL_COMPOSITE_VALUE_3 = 0x1002

# ============================================================================
# Device Types
# ============================================================================

DEVICE_AUTO = 'auto'
DEVICE_CPU = 'cpu'
DEVICE_CUDA = 'cuda'

# ============================================================================
# Tensor Dimensions
# ============================================================================

IMAGE_RANK = 3        # (height, width, channels)
FILTER_RANK = 4       # (height, width, in_channels, out_channels)
