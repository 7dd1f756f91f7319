"""DHCP lease report service.

Lists DHCP server leases and pings every leased address once, producing
one LeaseReport per lease.
"""

import logging

from routeros_api_client.domain.models import LeaseReport
from routeros_api_client.infra.routeros.api_client import RouterOSApiClient
from routeros_api_client.infra.routeros.parser import Record, Reply
from routeros_api_client.infra.routeros.query import Query

logger = logging.getLogger(__name__)

LEASE_ENDPOINT = "/ip/dhcp-server/lease/print"
PING_ENDPOINT = "/ping"


class LeaseReportService:
    """Service for DHCP lease reports.

    Example:
        async with RouterOSApiClient(params) as client:
            reports = await LeaseReportService(client).collect()
    """

    def __init__(self, client: RouterOSApiClient, ping_count: int = 1) -> None:
        self.client = client
        self.ping_count = ping_count

    async def get_leases(self) -> list[Record]:
        """Return all DHCP server leases."""
        reply = await self.client.query_read(LEASE_ENDPOINT)
        if not isinstance(reply, Reply):
            logger.error("Lease listing aborted by !fatal reply")
            return []
        if reply.is_trap:
            logger.warning(f"Lease listing failed: {reply.after.get('message')}")
        return list(reply.rows)

    async def ping(self, address: str) -> str | None:
        """Ping an address from the router and return the first reported time."""
        query = Query(PING_ENDPOINT).equal("address", address).equal("count", self.ping_count)
        reply = await self.client.query_read(query)

        if not isinstance(reply, Reply) or not reply.rows:
            return None
        return reply.rows[0].get("time")

    async def collect(self) -> list[LeaseReport]:
        """Build the lease report."""
        reports = []
        for lease in await self.get_leases():
            address = lease.get("address")
            if not address:
                continue

            reports.append(
                LeaseReport(
                    address=address,
                    comment=lease.get("comment"),
                    mac_address=lease.get("mac-address"),
                    host=lease.get("host-name"),
                    ping=await self.ping(address),
                )
            )

        logger.info(f"Collected {len(reports)} DHCP lease reports")
        return reports
