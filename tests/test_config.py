import dataclasses

import pytest

from config import Config, ConfigError, load_config


def test_load_config_from_environment():
    cfg = load_config({
        'GITLAB_TOKEN': 'glpat-test-token',
        'GITLAB_BASE_URL': 'https://gitlab.example.com/',
        'LOG_LEVEL': 'debug',
        'REQUEST_TIMEOUT': '15000',
        'MAX_RETRIES': '5',
        'LOG_PAYLOADS': 'true',
    })
    assert cfg == Config(
        gitlab_base_url='https://gitlab.example.com',
        gitlab_token='glpat-test-token',
        request_timeout=15.0,
        max_retries=5,
        log_level='DEBUG',
        log_payloads=True,
    )


def test_defaults():
    cfg = load_config({'GITLAB_TOKEN': 't'})
    assert cfg.gitlab_base_url == 'https://gitlab.com'
    assert cfg.request_timeout == 20.0
    assert cfg.max_retries == 3
    assert cfg.log_level == 'INFO'
    assert cfg.log_payloads is False


def test_missing_token():
    with pytest.raises(ConfigError, match='GITLAB_TOKEN environment variable is required'):
        load_config({})


@pytest.mark.parametrize('env, message', [
    ({'LOG_LEVEL': 'TRACE'}, 'Invalid LOG_LEVEL'),
    ({'REQUEST_TIMEOUT': 'soon'}, 'Invalid REQUEST_TIMEOUT'),
    ({'REQUEST_TIMEOUT': '0'}, 'Invalid REQUEST_TIMEOUT'),
    ({'MAX_RETRIES': '0'}, 'Invalid MAX_RETRIES'),
])
def test_invalid_values(env, message):
    env = dict(env, GITLAB_TOKEN='t')
    with pytest.raises(ConfigError, match=message):
        load_config(env)


def test_warn_alias():
    assert load_config({'GITLAB_TOKEN': 't', 'LOG_LEVEL': 'WARN'}).log_level == 'WARNING'


def test_reads_os_environ_by_default(monkeypatch):
    monkeypatch.setenv('GITLAB_TOKEN', 'from-env')
    monkeypatch.setenv('MAX_RETRIES', '4')
    assert load_config().max_retries == 4


def test_config_is_immutable_and_hides_token():
    cfg = load_config({'GITLAB_TOKEN': 'glpat-super-secret'})
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.max_retries = 10
    assert 'glpat-super-secret' not in repr(cfg)


def test_with_overrides_ignores_none():
    cfg = load_config({'GITLAB_TOKEN': 't'}).with_overrides(max_retries=7, request_timeout=None)
    assert cfg.max_retries == 7
    assert cfg.request_timeout == 20.0
