"""Supplier-native passenger details carried from the storefront to the order request."""

import re
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Storefront form names -> Duffel names
_FORM_FIELDS = {
    "firstName": "given_name",
    "lastName": "family_name",
    "dateOfBirth": "born_on",
    "phoneNumber": "phone_number",
}


def to_ymd(value: str) -> str:
    """Normalise "10/10/1988" or "10-10-1988" (day first) to "1988-10-10"."""
    value = value.strip()
    if _ISO_DATE.match(value):
        return value
    match = _DAY_FIRST.match(value)
    if match:
        day, month, year = match.groups()
        return date(int(year), int(month), int(day)).isoformat()
    try:
        return datetime.fromisoformat(value).date().isoformat()
    except ValueError:
        return value


class IdentityDocument(BaseModel):
    type: str = "passport"
    unique_identifier: str
    issuing_country_code: str | None = None
    expires_on: str | None = None


class LoyaltyAccount(BaseModel):
    airline_iata_code: str
    account_number: str


class PassengerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    type: Literal["adult", "child", "infant_without_seat"] | None = None
    title: str | None = None
    gender: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    born_on: str | None = None
    email: str | None = None
    phone_number: str | None = None
    identity_documents: list[IdentityDocument] | None = None
    loyalty_programme_accounts: list[LoyaltyAccount] | None = None

    @model_validator(mode="before")
    @classmethod
    def expand_shorthands(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for form_name, name in _FORM_FIELDS.items():
            if form_name in data and name not in data:
                data[name] = data.pop(form_name)

        passport = data.pop("passport", None)
        if passport and not isinstance(passport, dict):
            raise ValueError("passport must be an object with number and issuing_country_code")
        if passport and passport.get("number") and not data.get("identity_documents"):
            data["identity_documents"] = [
                {
                    "type": "passport",
                    "unique_identifier": passport["number"],
                    "issuing_country_code": passport.get("issuing_country_code"),
                    "expires_on": passport.get("expires_on"),
                }
            ]

        frequent_flyer = data.pop("frequent_flyer", None)
        if frequent_flyer and not isinstance(frequent_flyer, dict):
            raise ValueError("frequent_flyer must be an object with program and number")
        if (
            frequent_flyer
            and frequent_flyer.get("program")
            and frequent_flyer.get("number")
            and not data.get("loyalty_programme_accounts")
        ):
            data["loyalty_programme_accounts"] = [
                {"airline_iata_code": frequent_flyer["program"], "account_number": frequent_flyer["number"]}
            ]

        # Empty lists are dropped so the order request leaves them unset.
        for key in ("identity_documents", "loyalty_programme_accounts"):
            if not data.get(key):
                data.pop(key, None)
        return data

    @field_validator("born_on")
    @classmethod
    def normalise_born_on(cls, value: str | None) -> str | None:
        return to_ymd(value) if value else value

    @field_validator("title")
    @classmethod
    def lowercase_title(cls, value: str | None) -> str | None:
        return value.strip().lower().rstrip(".") if value else value

    @field_validator("gender")
    @classmethod
    def normalise_gender(cls, value: str | None) -> str | None:
        if not value:
            return value
        initial = value.strip().lower()[:1]
        return initial if initial in ("m", "f", "x") else "x"

    def to_supplier(self) -> dict[str, Any]:
        """Order-request passenger with unset optional fields omitted."""
        return self.model_dump(exclude_none=True)
