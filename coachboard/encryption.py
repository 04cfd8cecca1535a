"""
Field-level encryption for free-text participant data (Fernet).

Check-in feedback and win notes are written by participants and can hold
anything, so they are stored encrypted. Text that must stay searchable
(the "Session N" outcomes token) is stored in plain columns instead.

FIELD_ENCRYPTION_KEY may hold a comma-separated list of keys: the first key
encrypts, every key can decrypt (MultiFernet key rotation).

Usage in models:
    from coachboard.encryption import encrypted_property

    class Note(models.Model):
        _text_encrypted = models.BinaryField(default=b"", blank=True)
        text = encrypted_property("_text_encrypted")
"""
import logging

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from django.conf import settings
from django.core.checks import Error, register

logger = logging.getLogger(__name__)

_fernet = None


class DecryptionError(Exception):
    """Raised when a stored value cannot be decrypted with the configured keys."""


def _get_fernet():
    """Lazy-initialise the cipher from FIELD_ENCRYPTION_KEY."""
    global _fernet
    if _fernet is None:
        key_string = settings.FIELD_ENCRYPTION_KEY
        if not key_string:
            raise ValueError("FIELD_ENCRYPTION_KEY is not set.")
        keys = [k.strip() for k in key_string.split(",") if k.strip()]
        ciphers = [Fernet(k.encode()) for k in keys]
        _fernet = ciphers[0] if len(ciphers) == 1 else MultiFernet(ciphers)
    return _fernet


def encrypt_field(plaintext):
    """Encrypt a string value. Returns bytes for storage in a BinaryField."""
    if plaintext is None or plaintext == "":
        return b""
    return _get_fernet().encrypt(plaintext.encode("utf-8"))


def decrypt_field(ciphertext):
    """Decrypt a BinaryField value back to a string."""
    if not ciphertext:
        return ""
    if isinstance(ciphertext, memoryview):
        ciphertext = bytes(ciphertext)
    try:
        return _get_fernet().decrypt(ciphertext).decode("utf-8")
    except InvalidToken:
        logger.error("Decryption failed; possible key mismatch or data corruption")
        raise DecryptionError("Decryption failed; possible key mismatch or data corruption")


def encrypted_property(field_name, placeholder="[DECRYPTION ERROR]"):
    """Model property that reads/writes plaintext through an encrypted BinaryField.

    Reads never raise: an undecryptable value shows ``placeholder`` so a
    bad row cannot break a whole page.
    """

    def getter(instance):
        try:
            return decrypt_field(getattr(instance, field_name))
        except DecryptionError:
            return placeholder

    def setter(instance, value):
        setattr(instance, field_name, encrypt_field(value))

    return property(getter, setter)


@register()
def check_encryption_key(app_configs, **kwargs):
    """System check: the configured key must round-trip a sample value."""
    global _fernet
    errors = []
    try:
        _fernet = None
        sample = "coachboard-encryption-selftest"
        if decrypt_field(encrypt_field(sample)) != sample:
            errors.append(
                Error(
                    "FIELD_ENCRYPTION_KEY round-trip check failed.",
                    hint="Check that FIELD_ENCRYPTION_KEY is a valid Fernet key.",
                    id="coachboard.E001",
                )
            )
    except Exception as exc:
        errors.append(
            Error(
                f"FIELD_ENCRYPTION_KEY is invalid or missing: {exc}",
                hint=(
                    "Generate a key with: "
                    "python -c \"from cryptography.fernet import Fernet; "
                    "print(Fernet.generate_key().decode())\""
                ),
                id="coachboard.E001",
            )
        )
    finally:
        _fernet = None
    return errors
