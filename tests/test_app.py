"""
Tests for the application factory.
"""
from unittest.mock import patch

from loyalty_portal import create_app


class TestCreateApp:

    def test_logging_configured_from_app_config(self):
        with patch('loyalty_portal.setup_logging') as setup_logging:
            app = create_app('testing')

        setup_logging.assert_called_once_with('WARNING', 'text')
        assert app.config['LOG_LEVEL'] == 'WARNING'

    def test_blueprints_registered(self):
        app = create_app('testing')

        prefixes = {rule.rule for rule in app.url_map.iter_rules()}
        assert '/api/trips' in prefixes
        assert '/api/referrals/invite' in prefixes
        assert '/api/profile/preferences' in prefixes
