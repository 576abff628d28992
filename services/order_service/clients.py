"""
Clients for the two upstream GraphQL services the order service reads from.

A null result from the remote service is a clean "absent" and returns None.
Anything else that prevents reading a well-formed answer (network errors,
timeouts, non-2xx statuses, non-JSON bodies, a response without `data`, or a
record that fails validation) raises UpstreamUnavailable.
"""
from decimal import Decimal

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from shared.errors import UpstreamUnavailable
from shared.observability import orders_upstream_requests_total
from .schemas import Product, Profile

logger = structlog.get_logger(__name__)

ME_QUERY = """
query {
  me {
    id
    name
    email
  }
}
"""

PRODUCT_BY_ID_QUERY = """
query($id: ID!) {
  productById(id: $id) {
    id
    name
    price
    stock
  }
}
"""


class GraphQLClient:
    service = "upstream"

    def __init__(self, url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def _fail(self, reason: str) -> UpstreamUnavailable:
        orders_upstream_requests_total.labels(service=self.service, outcome="error").inc()
        logger.warning("upstream_request_failed", service=self.service, url=self.url, reason=reason)
        return UpstreamUnavailable(self.service, reason)

    async def _query(self, field: str, query: str, variables: dict | None = None, headers: dict | None = None):
        payload = {"query": query}
        if variables is not None:
            payload["variables"] = variables

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, json=payload, headers=headers)
                resp.raise_for_status()
                # Prices must never pass through binary floating point
                body = resp.json(parse_float=Decimal)
        except httpx.TimeoutException as e:
            raise self._fail("timeout") from e
        except httpx.HTTPStatusError as e:
            raise self._fail(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise self._fail(f"transport error: {e}") from e
        except ValueError as e:
            raise self._fail("response is not JSON") from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or field not in data:
            raise self._fail(f"response has no data.{field}")
        return data[field]

    def _parse(self, model: type[BaseModel], record):
        if record is None:
            orders_upstream_requests_total.labels(service=self.service, outcome="absent").inc()
            return None
        try:
            parsed = model.model_validate(record)
        except ValidationError as e:
            raise self._fail(f"malformed {self.service} record") from e
        orders_upstream_requests_total.labels(service=self.service, outcome="found").inc()
        return parsed


class IdentityClient(GraphQLClient):
    service = "user"

    async def fetch_profile(self, token: str) -> Profile | None:
        """Asks the user service who the token belongs to; it verifies the token itself."""
        record = await self._query("me", ME_QUERY, headers={"Authorization": f"Bearer {token}"})
        return self._parse(Profile, record)


class CatalogClient(GraphQLClient):
    service = "product"

    async def fetch_product(self, product_id: str) -> Product | None:
        # Catalog reads are unauthenticated: no credential is forwarded
        record = await self._query("productById", PRODUCT_BY_ID_QUERY, variables={"id": product_id})
        return self._parse(Product, record)
