import pytest

from core.config import Settings
from core.errors import ConfigurationError, ErrorKind


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})

    assert settings.alchemy_api_key is None
    assert settings.opensea_api_key is None
    assert settings.rate_limit_delay == 1.0
    assert settings.max_retries == 3
    assert settings.backoff_base == 1.0
    assert settings.opensea_base_url == "https://api.opensea.io"
    assert settings.log_level == "INFO"


def test_reads_keys_and_policy():
    settings = Settings.from_env({
        "ALCHEMY_API_KEY": " alc ",
        "OPENSEA_API_KEY": "",
        "NFTSCAN_API_KEY": "scan",
        "NFT_SCANNER_RATE_LIMIT_DELAY": "0.5",
        "NFT_SCANNER_MAX_RETRIES": "5",
        "NFT_SCANNER_REQUEST_TIMEOUT": "12",
        "NFT_SCANNER_LOG_LEVEL": "debug",
        "OPENSEA_BASE_URL": "http://localhost:8080/",
    })

    assert settings.alchemy_api_key == "alc"
    assert settings.opensea_api_key is None
    assert settings.nftscan_api_key == "scan"
    assert settings.rate_limit_delay == 0.5
    assert settings.max_retries == 5
    assert settings.request_timeout == 12.0
    assert settings.log_level == "DEBUG"
    assert settings.opensea_base_url == "http://localhost:8080"


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_bad_numbers_raise_configuration_error(value):
    with pytest.raises(ConfigurationError, match="NFT_SCANNER_MAX_RETRIES") as excinfo:
        Settings.from_env({"NFT_SCANNER_MAX_RETRIES": value})
    assert excinfo.value.kind is ErrorKind.CONFIGURATION
