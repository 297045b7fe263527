"""User-facing message templates, keyed for translation by the hosting proxy."""

MESSAGES: dict[str, str] = {
    "warn.cert.expired": (
        "The root CA certificate has expired (valid until {0}, now {1}). "
        "Clients will reject intercepted connections until a new root CA is generated "
        "and installed. Generate a new root CA certificate now?"
    ),
    "warn.cert.failed": (
        "Failed to generate a new root CA certificate, the expired one is still in use. "
        "Check the log for details."
    ),
    "importpem.failedreadfile": "Failed to read the PEM file: {0}",
    "importpem.nocertsection": (
        "No certificate section found, expected a section between {0} and {1}."
    ),
    "importpem.certnobase64": "The certificate section does not contain valid base64 data.",
    "importpem.noprivkeysection": (
        "No private key section found, expected a section between {0} and {1}."
    ),
    "importpem.privkeynobase64": "The private key section does not contain valid base64 data.",
    "importpem.failedkeystore": "Failed to create the root CA from the certificate and key: {0}",
    "importpem.legacyfailed": "The legacy certificate subsystem rejected the import: {0}",
    "importpem.unavailable": "No certificate subsystem is available to import the root CA.",
}


def get_message(key: str, *args: object) -> str:
    """Return the message for key with positional substitutions applied.

    Raises:
        KeyError: If the key is unknown.
    """
    return MESSAGES[key].format(*args)
