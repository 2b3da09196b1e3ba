"""
Loyalty portal entry point.
"""
import os
import sys

from loyalty_portal import create_app
from loyalty_portal.utils.logging_config import get_logger

logger = get_logger('loyalty_portal.run')

config_name = os.getenv('FLASK_ENV', 'production')

try:
    app = create_app(config_name)
    logger.info('Routes registered: %d', len(list(app.url_map.iter_rules())))
except Exception:
    logger.exception('Fatal error during app creation (config=%s)', config_name)
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
