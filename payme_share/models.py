"""
Share-link payload models.

Links carry compact single/two letter keys to keep URLs short; each model
maps between readable attribute names and those wire keys.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .routes import PAY


@dataclass
class BillItem:
    """Single line item of a bill"""
    name: str
    price: float
    owners: List[int] = field(default_factory=list)  # member indices

    def to_dict(self) -> Dict[str, Any]:
        return {"n": self.name, "p": self.price, "o": list(self.owners)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BillItem":
        return cls(name=data["n"], price=data["p"], owners=list(data.get("o", [])))


@dataclass
class BillData:
    title: str
    members: List[str]
    items: List[BillItem]
    service_charge: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "t": self.title,
            "m": list(self.members),
            "i": [item.to_dict() for item in self.items],
            "s": self.service_charge,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BillData":
        return cls(
            title=data.get("t", ""),
            members=list(data.get("m", [])),
            items=[BillItem.from_dict(item) for item in data.get("i", [])],
            service_charge=bool(data.get("s", False)),
        )


@dataclass
class SimpleData:
    """Even split of a single total"""
    total: str
    people_count: int
    service_charge: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"ta": self.total, "pc": self.people_count, "sc": self.service_charge}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimpleData":
        return cls(
            total=data.get("ta", ""),
            people_count=data.get("pc", 1),
            service_charge=bool(data.get("sc", False)),
        )


@dataclass
class CompactAccount:
    bank_code: str
    account_number: str

    def to_dict(self) -> Dict[str, Any]:
        return {"b": self.bank_code, "a": self.account_number}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompactAccount":
        return cls(bank_code=data["b"], account_number=data["a"])


@dataclass
class CompressedData:
    """Everything a share link carries in its hash fragment"""
    bank_code: str
    account_number: str
    amount: str = ""
    comment: str = ""
    mode: str = PAY
    bill: Optional[BillData] = None
    simple: Optional[SimpleData] = None
    template_id: Optional[str] = None
    accounts: Optional[List[CompactAccount]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "b": self.bank_code,
            "a": self.account_number,
            "m": self.amount,
            "c": self.comment,
            "mo": self.mode,
        }
        if self.bill is not None:
            data["bd"] = self.bill.to_dict()
        if self.simple is not None:
            data["sd"] = self.simple.to_dict()
        if self.template_id is not None:
            data["tid"] = self.template_id
        if self.accounts is not None:
            data["ac"] = [account.to_dict() for account in self.accounts]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompressedData":
        bill = data.get("bd")
        simple = data.get("sd")
        accounts = data.get("ac")
        return cls(
            bank_code=data.get("b", ""),
            account_number=data.get("a", ""),
            amount=data.get("m", ""),
            comment=data.get("c", ""),
            mode=data.get("mo", PAY),
            bill=BillData.from_dict(bill) if bill is not None else None,
            simple=SimpleData.from_dict(simple) if simple is not None else None,
            template_id=data.get("tid"),
            accounts=(
                [CompactAccount.from_dict(a) for a in accounts]
                if accounts is not None
                else None
            ),
        )


@dataclass
class BackupPayload:
    """Snapshot of local settings carried by a backup link"""
    timestamp: int  # milliseconds since epoch
    keys: Dict[str, str] = field(default_factory=dict)
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"v": self.version, "ts": self.timestamp, "keys": dict(self.keys)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BackupPayload":
        return cls(
            timestamp=data["ts"],
            keys=dict(data.get("keys", {})),
            version=data.get("v", 1),
        )
