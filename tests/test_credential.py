"""Testes para Credential."""

import pytest

from veil_secrets import DEFAULT_LENGTH, Credential, Hasher
from veil_secrets.utils import encode_bytes


@pytest.fixture
def hasher():
    return Hasher.create("HKDF", secret=b"ultrasecure", salt=b"salt")


def test_credential_defaults():
    """Testa valores padrão de uma credencial nova."""
    credential = Credential("password", group="db")

    assert credential.length == DEFAULT_LENGTH
    assert credential.version == 0
    assert credential.frozen is False
    assert credential.explicit_value is None
    assert credential.path == "db/password"


def test_credential_explicit_value_is_frozen_by_default():
    """Testa que valor explícito congela a credencial por padrão."""
    credential = Credential("token", explicit_value="abc")

    assert credential.frozen is True
    assert credential.explicit_value == b"abc"
    assert credential.path == "token"


def test_credential_explicit_frozen_overrides_default():
    """Testa que frozen explícito prevalece sobre a regra padrão."""
    assert Credential("token", explicit_value=b"abc", frozen=False).frozen is False
    assert Credential("token", frozen=True).frozen is True


def test_credential_validation():
    """Testa validação de tamanho e versão."""
    with pytest.raises(ValueError, match="deve ser inteiro positivo"):
        Credential("foo", length=0)

    with pytest.raises(ValueError, match="deve ser inteiro positivo"):
        Credential("foo", length=True)

    with pytest.raises(ValueError, match="inteiro não negativo"):
        Credential("foo", version=-1)

    with pytest.raises(TypeError, match="deve ser str ou bytes"):
        Credential("foo", explicit_value=123)


def test_credential_derived_value(hasher):
    """Testa que o valor derivado usa caminho, versão e tamanho."""
    credential = Credential("password", group="db", length=15)

    value = credential.value(hasher)

    assert len(value) == 15
    assert value == hasher.derive("db/password", 0, 15)
    assert value != Credential("password", length=15).value(hasher)


def test_credential_explicit_value_ignores_hasher_and_length(hasher):
    """Testa que o valor explícito é devolvido literalmente."""
    credential = Credential("token", length=5, explicit_value=b"longer-than-five", frozen=False)
    credential.rotate()

    assert credential.value(hasher) == b"longer-than-five"
    assert credential.value(hasher.rotated()) == b"longer-than-five"


def test_credential_rotate(hasher):
    """Testa rotação de credencial não congelada."""
    credential = Credential("password", length=20)
    old_value = credential.value(hasher)

    assert credential.rotate() is credential
    assert credential.version == 1
    assert credential.value(hasher) != old_value


def test_credential_rotate_frozen_is_noop(hasher):
    """Testa que rotação de credencial congelada não tem efeito."""
    credential = Credential("password", frozen=True)
    old_value = credential.value(hasher)

    assert credential.rotate() is credential
    assert credential.version == 0
    assert credential.value(hasher) == old_value


def test_credential_pin(hasher):
    """Testa que pin() fixa o valor derivado atual."""
    credential = Credential("password", length=12, frozen=True)
    expected = credential.value(hasher)

    credential.pin(hasher)

    assert credential.explicit_value == expected
    assert credential.value(hasher.rotated()) == expected


def test_credential_pin_keeps_explicit_value(hasher):
    """Testa que pin() não altera valor explícito."""
    credential = Credential("token", explicit_value=b"abc")
    credential.pin(hasher)
    assert credential.explicit_value == b"abc"


def test_credential_to_dict_never_persists_derived_value():
    """Testa que apenas metadados são persistidos para valores derivados."""
    credential = Credential("password", length=31, version=4)

    assert credential.to_dict() == {
        "length": 31,
        "version": 4,
        "frozen": False,
        "value": None,
    }


def test_credential_to_dict_persists_explicit_value():
    """Testa que valores explícitos são persistidos em base64."""
    credential = Credential("token", explicit_value=b"\x00\xffraw")
    assert credential.to_dict()["value"] == encode_bytes(b"\x00\xffraw")


def test_credential_from_dict_preserves_metadata(hasher):
    """Testa reconstrução exata a partir de to_dict()."""
    original = Credential("password", group="db", length=22, version=3)
    explicit = Credential("token", explicit_value=b"abc", frozen=False)

    restored = Credential.from_dict("password", original.to_dict(), group="db")
    restored_explicit = Credential.from_dict("token", explicit.to_dict())

    assert restored == original
    assert restored.value(hasher) == original.value(hasher)
    assert restored_explicit == explicit
    assert restored_explicit.frozen is False


def test_credential_repr_hides_value():
    """Testa que repr não expõe o valor explícito."""
    assert "supersecret" not in repr(Credential("token", explicit_value="supersecret"))


def test_credential_from_dict_applies_frozen_default_rule():
    """Testa que frozen ausente segue a regra do valor explícito."""
    explicit = Credential.from_dict(
        "token", {"length": 8, "version": 0, "value": encode_bytes(b"abc")}
    )
    derived = Credential.from_dict("password", {"length": 8, "version": 2, "value": None})

    assert explicit.frozen is True
    assert derived.frozen is False
    assert derived.version == 2
