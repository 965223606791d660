# pamstream - Configuration

import os


class Config:
    """Application configuration."""
    # Logging
    LOG_LEVEL = os.environ.get('PAMSTREAM_LOG_LEVEL', 'WARNING').upper()
    LOG_FORMAT = os.environ.get(
        'PAMSTREAM_LOG_FORMAT', '%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Plain (ASCII) raster layout; any layout is valid, these only keep lines short
    PLAIN_LINE_LENGTH = int(os.environ.get('PAMSTREAM_PLAIN_LINE_LENGTH', '79'))
    PBM_DIGITS_PER_LINE = int(os.environ.get('PAMSTREAM_PBM_DIGITS_PER_LINE', '70'))

    # Viewer zoom bounds, percent
    ZOOM_MIN_PERCENT = int(os.environ.get('PAMSTREAM_ZOOM_MIN', '10'))
    ZOOM_MAX_PERCENT = int(os.environ.get('PAMSTREAM_ZOOM_MAX', '3200'))
    # sample grid and hover box are drawn from this zoom on
    GRID_MIN_ZOOM_PERCENT = int(os.environ.get('PAMSTREAM_GRID_MIN_ZOOM', '800'))
