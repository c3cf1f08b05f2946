from sluice import config as config_module
from sluice.config import Settings


class FakeConfig:
    values = {}

    def __init__(self, name):
        self.name = name

    def get(self, key):
        return self.values.get(f"{self.name}:{key}")

    get_int = get
    get_bool = get


def test_defaults(monkeypatch):
    monkeypatch.setattr(config_module.pulumi, 'Config', FakeConfig)
    monkeypatch.setattr(FakeConfig, 'values', {})
    settings = Settings.from_config()
    assert settings.interval == 60
    assert settings.size == 50
    assert settings.compression == 'UNCOMPRESSED'
    assert settings.prefix == 'firehose/'
    assert settings.hook == 'Xformer'
    assert settings.hook_timeout == 300
    assert settings.noop is False


def test_overrides(monkeypatch):
    monkeypatch.setattr(config_module.pulumi, 'Config', FakeConfig)
    monkeypatch.setattr(FakeConfig, 'values', {
        'sluice:bufferInterval': 90,
        'sluice:bufferSize': 10,
        'sluice:compression': 'GZIP',
        'sluice:prefix': '',
        'sluice:noop': True,
        'other:bufferSize': 99,
    })
    settings = Settings.from_config()
    assert settings.interval == 90
    assert settings.size == 10
    assert settings.compression == 'GZIP'
    assert settings.prefix == ''
    assert settings.noop is True


def test_stack_name_from_config(monkeypatch):
    monkeypatch.setattr(config_module.pulumi, 'Config', FakeConfig)
    monkeypatch.setattr(FakeConfig, 'values', {'sluice:stackName': 'Firehose'})
    assert Settings.from_config().stack_name == 'Firehose'


def test_scoped_stack_name(monkeypatch):
    monkeypatch.setattr(config_module.pulumi, 'get_stack', lambda: 'dev')
    assert Settings().scoped_stack_name() == 'TransformerStack-dev'
    assert Settings(stack_name='Firehose').scoped_stack_name() == 'Firehose-dev'
