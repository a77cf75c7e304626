# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for runtime configuration."""


# standard libs
import re
import logging

# external libs
import pytest
from cmdkit.config import Configuration, Namespace, ConfigurationError

# internal libs
from devgrid.core.config import (default, reload_file, blame, get_logging_style, build_preloads,
                                 get_supervisor_options, get_deploy_path, get_services,
                                 LOGGING_STYLES, DEFAULT_LOGGING_STYLE)
from devgrid.core.logging import level_from_name, TRACE


@pytest.mark.unit
class TestDefaults:
    """Unit tests for default configuration."""

    def test_sections(self) -> None:
        assert set(default.keys()) == {'logging', 'supervisor', 'deploy', 'service'}
        assert default.service == {}

    def test_supervisor(self) -> None:
        assert default.supervisor.poll == 0.25
        assert default.supervisor.stop_timeout == 10
        assert default.supervisor.kill_timeout == 5
        assert default.supervisor.ready_timeout == 60

    def test_logging(self) -> None:
        assert default.logging.style == DEFAULT_LOGGING_STYLE
        assert default.logging.format == LOGGING_STYLES[DEFAULT_LOGGING_STYLE]['format']


@pytest.mark.unit
class TestLoading:
    """Unit tests for loading configuration."""

    def test_missing_file(self, tmp_path) -> None:
        assert reload_file(str(tmp_path / 'config.toml')) == {}

    def test_file(self, tmp_path) -> None:
        filepath = tmp_path / 'config.toml'
        filepath.write_text('[supervisor]\nstop_timeout = 2\n\n'
                            '[service.db]\nargv = "bin/db"\n\n'
                            '[service.db.ready]\nport = 5432\n')
        data = reload_file(str(filepath))
        assert data.supervisor.stop_timeout == 2
        assert data.service.db.argv == 'bin/db'
        assert data.service.db.ready.port == 5432

    def test_bad_file(self, tmp_path) -> None:
        filepath = tmp_path / 'config.toml'
        filepath.write_text('[supervisor\n')
        with pytest.raises(ConfigurationError, match=re.escape(str(filepath))):
            reload_file(str(filepath))

    def test_blame(self) -> None:
        config = Configuration(default=default, custom=Namespace({'supervisor': {'poll': 1}}))
        assert blame(config, 'supervisor', 'poll') == 'from: <custom>'
        assert blame(config, 'supervisor', 'stop_timeout') == 'from: <default>'

    @pytest.mark.parametrize('style', list(LOGGING_STYLES))
    def test_logging_style(self, style: str) -> None:
        config = Configuration(default=default, custom=Namespace({'logging': {'style': style.upper()}}))
        assert get_logging_style(config) == style
        assert build_preloads(config).logging == LOGGING_STYLES[style]

    def test_bad_logging_style(self) -> None:
        config = Configuration(default=default, custom=Namespace({'logging': {'style': 'fancy'}}))
        with pytest.raises(ConfigurationError, match='fancy'):
            get_logging_style(config)


@pytest.mark.unit
class TestLoggingLevel:
    """Unit tests for logging level names."""

    @pytest.mark.parametrize('name, level', [('trace', TRACE), ('debug', logging.DEBUG), ('INFO', logging.INFO),
                                             ('Warning', logging.WARNING), ('error', logging.ERROR),
                                             ('critical', logging.CRITICAL)])
    def test_names(self, name: str, level: int) -> None:
        assert level_from_name(name) == level

    @pytest.mark.parametrize('name', ['loud', 10, None])
    def test_bad_names(self, name) -> None:
        with pytest.raises(ConfigurationError):
            level_from_name(name)


@pytest.mark.unit
class TestOptions:
    """Unit tests for checked access to supervisor and service options."""

    def test_supervisor_defaults(self) -> None:
        options = get_supervisor_options(Configuration(default=default))
        assert options == {'poll': 0.25, 'stop_timeout': 10.0, 'kill_timeout': 5.0, 'ready_timeout': 60.0}
        assert all(isinstance(value, float) for value in options.values())

    def test_supervisor_custom(self) -> None:
        config = Configuration(default=default, custom=Namespace({'supervisor': {'stop_timeout': '2.5'}}))
        assert get_supervisor_options(config).stop_timeout == 2.5

    @pytest.mark.parametrize('value', [0, -1, 'soon'])
    def test_supervisor_bad_value(self, value) -> None:
        config = Configuration(default=default, custom=Namespace({'supervisor': {'kill_timeout': value}}))
        with pytest.raises(ConfigurationError, match=re.escape('supervisor.kill_timeout')) as exc_info:
            get_supervisor_options(config)
        assert 'from: <custom>' in str(exc_info.value)

    def test_deploy_path(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv('HOME', str(tmp_path))
        config = Configuration(default=default, custom=Namespace({'deploy': {'path': '~/grid'}}))
        assert get_deploy_path(config) == str(tmp_path / 'grid')

    def test_deploy_path_missing(self) -> None:
        config = Configuration(default=default, custom=Namespace({'deploy': {'path': ''}}))
        with pytest.raises(ConfigurationError, match='deploy.path'):
            get_deploy_path(config)

    def test_services(self) -> None:
        config = Configuration(default=default, custom=Namespace({
            'service': {'db': {'argv': 'bin/db'}, 'api': {'argv': 'bin/api'}}}))
        assert list(get_services(config)) == ['db', 'api']

    def test_services_not_table(self) -> None:
        config = Configuration(default=default, custom=Namespace({'service': 'db'}))
        with pytest.raises(ConfigurationError, match='service'):
            get_services(config)
