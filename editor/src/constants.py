"""
Mesmerise Image Editor - Constants and Configuration

This module contains all constant values used throughout the application:
- Effect catalog ranges and defaults
- Layer geometry constraints
- Halftone dot sizes and shapes
- Render scheduling intervals
- Export defaults
"""

# ======================================================================
# EFFECT CATALOG (SCALAR SLIDERS)
# ======================================================================
# kind: (display name, min, max, default, step)

SCALAR_EFFECTS = {
    'brightness': ('Brightness', -100, 100, 0, 1),
    'contrast':   ('Contrast', -100, 100, 0, 1),
    'saturation': ('Saturation', -100, 100, 0, 1),
    'vignette':   ('Vignette', 0, 100, 0, 1),
    'grain':      ('Camera Grain', 0, 100, 0, 1),
    'resolution': ('Resolution', 10, 100, 100, 5),
    'invert':     ('Invert', 0, 100, 0, 1),
    'sharpen':    ('Sharpen', 0, 200, 0, 1),
    'sepia':      ('Sepia', 0, 100, 0, 1),
}

# ======================================================================
# EFFECT CATALOG (CUSTOM RECORDS)
# ======================================================================

TINT_DEFAULTS = {
    'color': '#ff0000',
    'mix': 30,
}

DUOTONE_DEFAULTS = {
    'colorA': '#0b3d91',  # shadow color
    'colorB': '#ffd166',  # highlight color
    'mix': 100,
    'mode': 'replace',
}

HALFTONE_DEFAULTS = {
    'shape': 'circle',
    'size': 'medium',
    'mode': 'monochrome',
    'blend': 'replace',
}

CUSTOM_EFFECTS = {
    'tint': ('Color Tint', TINT_DEFAULTS),
    'duotone': ('Duotone', DUOTONE_DEFAULTS),
    'halftone': ('Halftone', HALFTONE_DEFAULTS),
}

# Allowed values for enum fields of custom records
CUSTOM_EFFECT_CHOICES = {
    'mode': {
        'duotone': ('replace', 'overlay'),
        'halftone': ('monochrome', 'color'),
    },
    'shape': {
        'halftone': ('circle', 'square', 'triangle', 'line'),
    },
    'size': {
        'halftone': ('small', 'medium', 'large'),
    },
    'blend': {
        'halftone': ('replace', 'overlay'),
    },
}

# Effects that may exist at most once across the whole composition
GLOBALLY_UNIQUE_EFFECTS = ('resolution',)

# ======================================================================
# KERNEL CONSTANTS
# ======================================================================

# Brightness/grain scale slider units to channel units
CHANNEL_UNIT = 2.55

# Luma weights for saturation (matches the classic grayscale conversion)
SATURATION_LUMA = (0.2989, 0.5870, 0.1140)

# Luma weights for tint, duotone and halftone
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Standard sepia matrix (rows produce r, g, b)
SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

# 3x3 unsharp kernel blended with identity by sharpen strength
SHARPEN_KERNEL = (-1, -1, -1, -1, 9, -1, -1, -1, -1)
IDENTITY_KERNEL = (0, 0, 0, 0, 1, 0, 0, 0, 0)

# Halftone
HALFTONE_DOT_SIZES = {
    'small': 4,
    'medium': 8,
    'large': 12,
}
HALFTONE_GAMMA = 0.9
HALFTONE_MIN_DARKNESS = 0.02  # Cells lighter than this draw nothing
HALFTONE_MIN_EXTENT = 1.0     # Smallest visible shape extent (pixels)

# ======================================================================
# LAYER GEOMETRY
# ======================================================================

# Interactive corner-handle resize limits (canvas pixels)
HANDLE_RESIZE_MIN = 10
HANDLE_RESIZE_MAX = 10000

# Corner handle hit radius (canvas pixels)
HANDLE_HIT_TOLERANCE = 6

# Corner handle names and the corner each one anchors
HANDLE_ANCHORS = {
    'nw': 'se',
    'ne': 'sw',
    'sw': 'ne',
    'se': 'nw',
}

# Crop / resize rectangle edges
RECT_EDGES = ('left', 'top', 'right', 'bottom')

# Sentinel target for a crop session acting on the base/composite
BASE_TARGET = None

# ======================================================================
# RENDER SCHEDULING
# ======================================================================

FRAME_INTERVAL_MS = 16     # One display refresh
VALUE_DEBOUNCE_MS = 16     # Slider drags
COLOR_DEBOUNCE_MS = 120    # Colour picker drags

# ======================================================================
# EXPORT
# ======================================================================

DEFAULT_EXPORT_FILENAME = 'mesmerise-edited-image.png'
EXPORT_FORMAT = 'PNG'

# ======================================================================
# CONFIGURATION
# ======================================================================

CONFIG_DIR_NAME = '.mesmerise'
CONFIG_FILE_NAME = 'config.json'
CONFIG_ENV_VAR = 'MESMERISE_CONFIG'
MAX_RECENT_FILES = 10

# ======================================================================
# LOGGING
# ======================================================================

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
