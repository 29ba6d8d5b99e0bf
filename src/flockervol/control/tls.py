"""Mutual TLS material for the control service.

Flocker authenticates API users with a client certificate signed by the
cluster CA.
"""

import ssl

from flockervol.core.errors import ConfigurationError


def build_ssl_context(ca_file: str, cert_file: str, key_file: str) -> ssl.SSLContext:
    """Build a client SSL context trusting the cluster CA.

    Args:
        ca_file: PEM bundle of the cluster CA.
        cert_file: API user certificate.
        key_file: API user private key.

    Raises:
        ConfigurationError: If any file is missing or unreadable.
    """
    try:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=ca_file)
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(f"Cannot load TLS material: {e}") from e
    return context
