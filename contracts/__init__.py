from contracts.base import ContractWrapper
from contracts.compliance import Compliance
from contracts.customers import Customers
from contracts.handle import ContractHandle
from contracts.offering import Offering
from contracts.offering_factory import OfferingFactory
from contracts.poly_token import PolyToken
from contracts.registrar import SecurityTokenRegistrar
from contracts.security_token import SecurityToken
from contracts.sto_contract import STOContract
from contracts.template import Template

__all__ = [
    "Compliance",
    "ContractHandle",
    "ContractWrapper",
    "Customers",
    "Offering",
    "OfferingFactory",
    "PolyToken",
    "STOContract",
    "SecurityToken",
    "SecurityTokenRegistrar",
    "Template",
]
