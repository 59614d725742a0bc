"""
Kinetic retention engine entry point.
"""
import os
import sys
import logging

from kinetic import create_app

logger = logging.getLogger('kinetic.run')

config_name = os.getenv('FLASK_ENV', 'production')

try:
    app = create_app(config_name)
    logger.info(f"[Kinetic] App created ({config_name}), {len(list(app.url_map.iter_rules()))} routes")
except Exception as e:
    logger.exception(f"[Kinetic] FATAL ERROR during app creation: {e}")
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
