import functools
import ssl
import typing

import certifi

from ._backends import Backend, get_backend
from .exceptions import InvalidUsageError
from .models import CACertsType, TLSVersion, create_ssl_context
from . import utils


class ClientConfig:
    """Settings shared by every 'HttpRequest' created with this config.

    The library never modifies a config after creating it so one
    instance can be shared by requests on any number of threads.
    """

    def __init__(
        self,
        *,
        backend: typing.Optional[Backend] = None,
        proxy: typing.Optional[str] = None,
        trust_env: bool = True,
        ca_certs: typing.Optional[CACertsType] = certifi.where(),
        tls_min_version: TLSVersion = TLSVersion.TLSv1_2,
        tls_max_version: TLSVersion = TLSVersion.MAXIMUM_SUPPORTED,
        buffer_size: int = utils.DEFAULT_BUFFER_SIZE,
        ignore_close_exceptions: bool = True,
        uncompress: bool = False,
        user_agent: typing.Optional[str] = None,
    ):
        if buffer_size < 1:
            raise InvalidUsageError("Size must be greater than zero")

        self.backend = backend or get_backend()
        self.proxy = proxy
        self.trust_env = trust_env

        self.ca_certs = ca_certs
        self.tls_min_version = tls_min_version
        self.tls_max_version = tls_max_version

        self.buffer_size = buffer_size
        self.ignore_close_exceptions = ignore_close_exceptions
        self.uncompress = uncompress
        self.user_agent = user_agent or utils.user_agent()

        self._ssl_contexts: typing.Dict[typing.Tuple[bool, bool], ssl.SSLContext] = {}

    def ssl_context(
        self, verify_certs: bool = True, verify_hostname: bool = True
    ) -> ssl.SSLContext:
        """Gets the 'ssl.SSLContext' for the given verification
        settings. Contexts are created on first use and then reused
        for the lifetime of the config.
        """
        key = (verify_certs, verify_certs and verify_hostname)
        ctx = self._ssl_contexts.get(key)
        if ctx is None:
            ctx = self._ssl_contexts.setdefault(
                key,
                create_ssl_context(
                    self.ca_certs,
                    self.tls_min_version,
                    self.tls_max_version,
                    verify_certs=verify_certs,
                    verify_hostname=verify_hostname,
                ),
            )
        return ctx

    def __repr__(self) -> str:
        return (
            f"<ClientConfig backend={type(self.backend).__name__} "
            f"proxy={self.proxy!r} uncompress={self.uncompress}>"
        )


@functools.lru_cache(1)
def default_config() -> ClientConfig:
    """Gets the config used by requests that aren't given one"""
    return ClientConfig()
