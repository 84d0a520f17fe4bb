from pathlib import Path

# ===========================
# Project Paths
# ===========================
PROJECT_ROOT = Path(__file__).parent.parent
DATA_RAW_DIR = PROJECT_ROOT / "data" / "raw"
OUTPUT_DIR = PROJECT_ROOT / "output"
CONFIG_PATH = PROJECT_ROOT / "config" / "arima_config.yaml"

# ===========================
# Data Column Names
# ===========================
DATE_COLUMN = 'dteday'
COUNT_COLUMN = 'cnt'

# Columns added while the series is progressively annotated
DERIVED_COLUMNS = {
    'clean': 'clean_cnt',
    'outlier': 'is_outlier',
    'weekly_ma': 'cnt_ma',
    'monthly_ma': 'cnt_ma30',
    'deseasonal': 'deseasonal_cnt',
    'residuals': 'residuals',
}

# ===========================
# Analysis Parameters
# ===========================
DEFAULT_CONFIG = {
    'data': {
        'path': str(DATA_RAW_DIR / 'day.csv'),
        'date_column': DATE_COLUMN,
        'count_column': COUNT_COLUMN,
    },
    'cleaning': {
        'iqr_multiplier': 3.0,
        'smoother_frac': 0.1,
    },
    'smoothing': {
        'weekly_order': 7,
        'monthly_order': 30,
    },
    'decomposition': {
        'period': 30,
        'robust': False,
    },
    'stationarity': {
        'alpha': 0.05,
        'regression': 'ct',
        'max_d': 2,
    },
    'correlation': {
        'nlags': 30,
    },
    'model': {
        'manual_order': [1, 1, 7],
        'max_p': 5,
        'max_q': 5,
        'seasonal_period': 30,
        'seasonal_search': False,
        'information_criterion': 'aic',
    },
    'forecast': {
        'horizon': 30,
        'levels': [80, 95],
    },
    'evaluation': {
        'holdout': 25,
    },
    'diagnostics': {
        'lags': [10],
        'residual_nlags': 45,
    },
    'output': {
        'save_plots': True,
        'show_plots': False,
    },
}

# ===========================
# Visualization Parameters
# ===========================
PLOT_CONFIG = {
    'figsize': (15, 6),
    'grid_figsize': (16, 12),
    'date_format': '%Y-%m',
    'style': 'seaborn-v0_8-darkgrid',
    'palette': 'husl',
    'dpi': 100,
}
