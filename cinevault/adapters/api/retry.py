"""
Relance avec backoff exponentiel des telechargements fournisseurs.

Relance automatiquement :
- les reponses 429 (rate limiting), converties en RateLimitError
- les erreurs de transport httpx (connexion refusee, timeout, coupure)

Les autres erreurs HTTP (404, 500...) sont propagees immediatement.

Usage:
    response = await request_with_retry(client, "GET", url, max_attempts=3)
"""

from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

# Erreurs considerees comme transitoires
RETRYABLE_ERRORS = (httpx.TransportError,)


class RateLimitError(Exception):
    """
    Exception levee quand le fournisseur retourne 429 Too Many Requests.

    Attributes:
        retry_after: Nombre de secondes a attendre (header Retry-After),
                     ou None si non specifie.
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


def with_retry(max_attempts: int = 3, max_wait: int = 30):
    """
    Decorateur de relance sur RateLimitError et erreurs de transport.

    Le jitter de wait_random_exponential evite que plusieurs telechargements
    paralleles relancent au meme instant.

    Args:
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives en secondes
    """
    return retry(
        retry=retry_if_exception_type((RateLimitError, *RETRYABLE_ERRORS)),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        # Format date HTTP non gere
        return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    max_wait: int = 30,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec relance automatique.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives
        **kwargs: Arguments passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        httpx.TransportError: Si le reseau reste injoignable
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
        response.raise_for_status()
        return response

    return await _do_request()
