"""
Security rule models shared by security lists and network security groups,
and their conversion to OCI SDK request models.
"""
from __future__ import annotations

from typing import Literal

import oci
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

AddressType = Literal["CIDR_BLOCK", "SERVICE_CIDR_BLOCK", "NETWORK_SECURITY_GROUP"]


class PortRange(BaseModel):
    model_config = ConfigDict(extra='forbid')

    min: int = Field(..., ge=1, le=65535)
    max: int = Field(..., ge=1, le=65535)

    @model_validator(mode="after")
    def check_order(self) -> PortRange:
        if self.min > self.max:
            raise ValueError(f"port range min ({self.min}) exceeds max ({self.max})")
        return self


class SecurityRuleInput(BaseModel):
    """A stateful or stateless ingress/egress rule."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid',
        alias_generator=to_camel,
        populate_by_name=True,
    )

    direction: Literal["INGRESS", "EGRESS"]
    protocol: str = Field(
        ...,
        description="Protocol number ('6' TCP, '17' UDP, '1' ICMP) or 'all'",
        min_length=1
    )
    source: str | None = Field(default=None, description="Source CIDR (ingress)")
    source_type: AddressType | None = None
    destination: str | None = Field(default=None, description="Destination CIDR (egress)")
    destination_type: AddressType | None = None
    is_stateless: bool | None = Field(default=None, description="Stateless rule")
    tcp_options: PortRange | None = Field(default=None, description="TCP destination port range")
    udp_options: PortRange | None = Field(default=None, description="UDP destination port range")
    description: str | None = None

    @model_validator(mode="after")
    def check_endpoint(self) -> SecurityRuleInput:
        if self.direction == "INGRESS" and not self.source:
            raise ValueError("INGRESS rules require source")
        if self.direction == "EGRESS" and not self.destination:
            raise ValueError("EGRESS rules require destination")
        return self


def _tcp_options(rule: SecurityRuleInput) -> oci.core.models.TcpOptions | None:
    if rule.tcp_options is None:
        return None
    return oci.core.models.TcpOptions(
        destination_port_range=oci.core.models.PortRange(
            min=rule.tcp_options.min, max=rule.tcp_options.max
        )
    )


def _udp_options(rule: SecurityRuleInput) -> oci.core.models.UdpOptions | None:
    if rule.udp_options is None:
        return None
    return oci.core.models.UdpOptions(
        destination_port_range=oci.core.models.PortRange(
            min=rule.udp_options.min, max=rule.udp_options.max
        )
    )


def ingress_rule(rule: SecurityRuleInput) -> oci.core.models.IngressSecurityRule:
    return oci.core.models.IngressSecurityRule(
        protocol=rule.protocol,
        source=rule.source,
        source_type=rule.source_type,
        is_stateless=rule.is_stateless,
        tcp_options=_tcp_options(rule),
        udp_options=_udp_options(rule),
        description=rule.description,
    )


def egress_rule(rule: SecurityRuleInput) -> oci.core.models.EgressSecurityRule:
    return oci.core.models.EgressSecurityRule(
        protocol=rule.protocol,
        destination=rule.destination,
        destination_type=rule.destination_type,
        is_stateless=rule.is_stateless,
        tcp_options=_tcp_options(rule),
        udp_options=_udp_options(rule),
        description=rule.description,
    )


def nsg_rule(rule: SecurityRuleInput) -> oci.core.models.AddSecurityRuleDetails:
    return oci.core.models.AddSecurityRuleDetails(
        direction=rule.direction,
        protocol=rule.protocol,
        source=rule.source,
        source_type=rule.source_type,
        destination=rule.destination,
        destination_type=rule.destination_type,
        is_stateless=rule.is_stateless,
        tcp_options=_tcp_options(rule),
        udp_options=_udp_options(rule),
        description=rule.description,
    )
