"""Domain models for RouterOS API reports.

Pydantic models for the data the services return to callers (CLI, JSON
reports). They are separate from the raw protocol records, which are plain
string dictionaries keyed by RouterOS attribute names.
"""

from pydantic import BaseModel, Field


class LeaseReport(BaseModel):
    """One DHCP lease with the result of a single ping to its address."""

    address: str = Field(..., description="Leased IP address")
    comment: str | None = Field(default=None, description="Lease comment")
    mac_address: str | None = Field(
        default=None, serialization_alias="macaddress", description="Client MAC address"
    )
    host: str | None = Field(default=None, description="Client host name")
    ping: str | None = Field(
        default=None, description="Round-trip time reported by /ping (None if unreachable)"
    )
