"""
Configuration settings for the Water Quality Hotspot Dashboard
"""

# Map Settings
MAP_CENTER_LAT = 33.8
MAP_CENTER_LON = -117.9
DEFAULT_ZOOM_LEVEL = 8
MIN_ZOOM_LEVEL = 4
MAX_ZOOM_LEVEL = 13
MAP_STYLE = "open-street-map"
DEFAULT_MAP_HEIGHT = 650

DEFAULT_MAP_VIEW = {
    'center': {'lat': MAP_CENTER_LAT, 'lon': MAP_CENTER_LON},
    'zoom': DEFAULT_ZOOM_LEVEL
}

# MapLibre basemaps that need no access token
VALID_MAP_STYLES = [
    'open-street-map', 'carto-positron', 'carto-darkmatter', 'carto-voyager', 'white-bg'
]

# Exceedance colour/size encoding
EXCEEDANCE_DOMAIN = (0, 100)
EXCEEDANCE_COLORSCALE = 'YlOrRd'
NA_COLOR = '#808080'               # Gray - no threshold / not computable
MARKER_SIZE_RANGE = (4, 17)
LEGEND_TITLE = '% exceeding'
HOTSPOT_CUTOFF = 50                # Stations at or above this count as hotspots in the watershed roll-up

# Parameter choice lists
TOP_PARAMETER_COUNT = 10

# Nutrients are offered as their own block in the constituent dropdown
NUTRIENT_PARAMETERS = [
    'Ammonia', 'Nitrate', 'Nitrite', 'TKN', 'TN', 'TP', 'Orthophosphate'
]

# Parameter -> TMDL parameter group
PARAMETER_GROUPS = {
    # Pathogens
    'ENT': 'Pathogens',
    'EC': 'Pathogens',
    'FC': 'Pathogens',
    'TC': 'Pathogens',
    # Metals
    'Cadmium': 'Metals',
    'Copper': 'Metals',
    'Lead': 'Metals',
    'Nickel': 'Metals',
    'Selenium': 'Metals',
    'Zinc': 'Metals',
    # Nutrients
    'Ammonia': 'Nutrients',
    'Nitrate': 'Nutrients',
    'Nitrite': 'Nutrients',
    'TKN': 'Nutrients',
    'TN': 'Nutrients',
    'TP': 'Nutrients',
    'Orthophosphate': 'Nutrients',
    # Toxics / pesticides
    'Chlorpyrifos': 'Toxicity',
    'Diazinon': 'Toxicity',
    'Malathion': 'Toxicity',
    'Toxicity': 'Toxicity',
    # Salts
    'Chloride': 'Salts',
    'Sulfate': 'Salts',
    'TDS': 'Salts',
}

# Expected table columns
OBSERVATION_COLUMNS = [
    'StationCode', 'Watershed', 'Parameter', 'Date', 'Result', 'Longitude', 'Latitude'
]
THRESHOLD_COLUMNS = ['Parameter', 'Threshold']
TMDL_COLUMNS = ['ParameterGroup', 'StationCode', 'Receiving']

# File/table names used by the dataset loaders
DATASET_TABLES = {
    'observations': 'observations',
    'thresholds': 'thresholds',
    'tmdl': 'tmdl',
}

# Table styling (shared by summary tables)
TABLE_STYLE = {
    'style_cell': {'textAlign': 'left', 'padding': '8px', 'fontSize': '12px'},
    'style_header': {'backgroundColor': '#007bff', 'color': 'white', 'fontWeight': 'bold'},
}

# Plot Settings
STATION_PLOT_HEIGHT = 350
PLOT_CONFIG = {
    'displayModeBar': True,
    'displaylogo': False,
    'modeBarButtonsToRemove': ['lasso2d', 'select2d'],
    'responsive': True
}

# App Settings
APP_TITLE = 'Water Quality Hotspots'
APP_DESCRIPTION = 'Explore how often monitoring stations exceed water quality thresholds'
