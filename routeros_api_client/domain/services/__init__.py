"""Domain services.

Services in this package:
- LeaseReportService: DHCP leases joined with a reachability probe
"""

from routeros_api_client.domain.services.leases import LeaseReportService

__all__ = [
    "LeaseReportService",
]
