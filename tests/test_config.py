"""Testes para CollectionConfig e AddOptions."""

import pytest

from veil_secrets import AddOptions, CollectionConfig, UnknownHasherVariant


ENV_KEYS = ("VEIL_DEFAULT_LENGTH", "VEIL_HASHER_VARIANT", "VEIL_KDF_ITERATIONS")


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_collection_config_defaults():
    """Testa valores padrão da configuração."""
    config = CollectionConfig()

    assert config.default_length == 128
    assert config.hasher_variant == "PBKDF2"
    assert config.hasher_params == {}
    assert config.audit_callback is None
    assert config.logger is None


def test_collection_config_validation():
    """Testa validação de CollectionConfig."""
    with pytest.raises(ValueError, match="Tamanho padrão deve ser inteiro positivo"):
        CollectionConfig(default_length=0)

    with pytest.raises(ValueError, match="Tamanho padrão deve ser inteiro positivo"):
        CollectionConfig(default_length="64")

    with pytest.raises(UnknownHasherVariant, match="'BCrypt' desconhecida"):
        CollectionConfig(hasher_variant="BCrypt")


def test_add_options_defaults():
    """Testa valores padrão de AddOptions."""
    options = AddOptions()

    assert options.value is None
    assert options.length is None
    assert options.frozen is None
    assert options.force is False


def test_collection_config_from_environment(clean_env):
    """Testa criação de config a partir de variáveis de ambiente."""
    clean_env.setenv("VEIL_DEFAULT_LENGTH", "64")
    clean_env.setenv("VEIL_HASHER_VARIANT", "PBKDF2")
    clean_env.setenv("VEIL_KDF_ITERATIONS", "5000")

    config = CollectionConfig.from_environment()

    assert config.default_length == 64
    assert config.hasher_variant == "PBKDF2"
    assert config.hasher_params == {"iterations": 5000}


def test_collection_config_from_environment_empty(clean_env):
    """Testa que a ausência de variáveis resulta nos padrões."""
    config = CollectionConfig.from_environment()
    assert config == CollectionConfig()


def test_collection_config_from_environment_custom_prefix(clean_env):
    """Testa prefixo customizado e argumentos adicionais."""
    clean_env.setenv("APP_DEFAULT_LENGTH", "32")

    config = CollectionConfig.from_environment(prefix="APP", hasher_variant="HKDF")

    assert config.default_length == 32
    assert config.hasher_variant == "HKDF"


def test_collection_config_iterations_only_for_pbkdf2(clean_env):
    """Testa que iterações são ignoradas para outras variantes."""
    clean_env.setenv("VEIL_HASHER_VARIANT", "Scrypt")
    clean_env.setenv("VEIL_KDF_ITERATIONS", "5000")

    config = CollectionConfig.from_environment()

    assert config.hasher_variant == "Scrypt"
    assert config.hasher_params == {}


def test_collection_config_from_environment_invalid_int(clean_env):
    """Testa erro para valor numérico inválido."""
    clean_env.setenv("VEIL_DEFAULT_LENGTH", "abc")

    with pytest.raises(ValueError, match="VEIL_DEFAULT_LENGTH deve ser um inteiro"):
        CollectionConfig.from_environment()


def test_collection_config_from_file(tmp_path):
    """Testa criação de config a partir de arquivo .env."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                'VEIL_DEFAULT_LENGTH="48"',
                'VEIL_HASHER_VARIANT="HKDF"',
                "",
            ]
        )
    )

    config = CollectionConfig.from_file(str(env_file))

    assert config.default_length == 48
    assert config.hasher_variant == "HKDF"


def test_collection_config_from_file_missing_file(tmp_path):
    """Testa erro quando arquivo .env não existe."""
    missing = tmp_path / "missing.env"

    with pytest.raises(FileNotFoundError, match="Arquivo .env não encontrado"):
        CollectionConfig.from_file(str(missing))


def test_collection_config_from_file_invalid_encoding(tmp_path):
    """Testa erro quando o arquivo .env tem encoding inválido."""
    env_file = tmp_path / ".env"
    env_file.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(UnicodeDecodeError):
        CollectionConfig.from_file(str(env_file))
