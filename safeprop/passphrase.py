# -*- coding: utf-8 -*-
import sys
from typing import IO, Optional

import keyring
from keyring.errors import KeyringError

from .log import logger
from .masked import MaskedWriter, read_masked_line

DEFAULT_PROMPT = "Keystore password: "
KEYRING_KEY = "ETH_PASSWORD"


class SecretResolver:
    """
    Passphrase priority: pre-supplied value > keyring (when a service is configured) > masked prompt.

    The resolved value is returned to the caller and nowhere else: not logged,
    not echoed, not persisted.
    """

    def __init__(
        self,
        env_secret: Optional[str] = None,
        channel: Optional[MaskedWriter] = None,
        stream: Optional[IO] = None,
        keyring_service: Optional[str] = None,
        keyring_key: str = KEYRING_KEY,
    ) -> None:
        self._env_secret = env_secret
        self.channel = channel if channel is not None else MaskedWriter(sys.stdout)
        self.stream = stream
        self.keyring_service = keyring_service
        self.keyring_key = keyring_key

    def _from_keyring(self) -> Optional[str]:
        if not self.keyring_service:
            return None
        try:
            return keyring.get_password(self.keyring_service, self.keyring_key)
        except KeyringError as e:
            logger.warning(f"⚠️ keyring lookup failed ({type(e).__name__}); falling back to prompt")
            return None

    def resolve(self, prompt_text: str = DEFAULT_PROMPT) -> str:
        if self._env_secret is not None:
            return self._env_secret
        stored = self._from_keyring()
        if stored:
            logger.info(f"🔑 Passphrase taken from keyring service={self.keyring_service}")
            return stored
        self.channel.mute()
        try:
            self.channel.write_raw(prompt_text)
            return read_masked_line(self.channel, self.stream)
        finally:
            self.channel.unmute()
            self.channel.write("\n")
