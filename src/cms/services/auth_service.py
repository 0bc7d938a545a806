from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import jwt
from jwt import PyJWKClient

from src.cms.core.exceptions import AuthError
from src.cms.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Editor:
    user_id: str
    session_id: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


class IdentityVerifier:
    """
    Проверка bearer-токенов внешнего провайдера идентификации.

    Токен: RS256 JWT, ключи берутся из JWKS провайдера. Если заданы
    authorized_parties, claim `azp` обязан входить в этот список.
    """

    algorithms = ["RS256"]

    def __init__(
        self,
        jwks_url: str,
        issuer: str | None = None,
        authorized_parties: Sequence[str] = (),
        leeway: int = 5,
    ) -> None:
        self.jwks_url = jwks_url
        self.issuer = issuer or None
        self.authorized_parties = tuple(authorized_parties)
        self.leeway = leeway
        self._jwks_client = PyJWKClient(jwks_url) if jwks_url else None

    def verify(self, token: str) -> Editor:
        if self._jwks_client is None:
            logger.warning("CMS_AUTH_JWKS_URL не задан, изменяющие запросы недоступны")
            raise AuthError("Identity provider is not configured")

        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": ["exp", "sub"], "verify_aud": False},
            )
        except jwt.PyJWTError as exc:
            logger.info("Токен отклонён: %s", exc)
            raise AuthError(str(exc)) from exc

        azp = claims.get("azp")
        if self.authorized_parties and azp not in self.authorized_parties:
            logger.info("Токен от неразрешённого источника azp=%s", azp)
            raise AuthError("Unauthorized party")

        return Editor(
            user_id=claims["sub"],
            session_id=claims.get("sid"),
            claims=claims,
        )
