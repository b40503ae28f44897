"""
Messages of the device application interface (ETSI GS MEC 016 V2.2.1).

Every message is an immutable pydantic model whose wire names follow the
standard (camelCase) while the Python attributes are snake_case. Each model
reports its structural problems through ``problems()``; parents aggregate the
problems of their children instead of stopping at the first one.
"""

import uuid
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from lcmp.errors import ValidationFailed

MAX_NAME_LENGTH = 32
MAX_DESCRIPTION_LENGTH = 128
SERVICE_CONTINUITY_VALUES = (0, 1)


def _too_long(value: str | None, field_name: str, limit: int = MAX_NAME_LENGTH) -> list[str]:
    if value is not None and len(value) > limit:
        return [f"{field_name} is too long"]
    return []


def _collect(items: Iterable["Message"]) -> list[str]:
    problems: list[str] = []
    for item in items:
        problems.extend(item.problems())
    return problems


class Message(BaseModel):
    """Base for all messages: frozen, populated by alias or by attribute name."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def problems(self) -> list[str]:
        return []

    def to_wire(self) -> dict:
        """JSON-compatible dict using the wire names, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def validate(message: Message) -> None:
    """Raise ValidationFailed with every problem found in ``message``."""
    problems = message.problems()
    if problems:
        raise ValidationFailed(problems)


class Polygon(Message):
    """
    Polygon as defined in RFC 7946.

    The first ring is the exterior ring; any further rings are holes.
    """

    coordinates: tuple[tuple[tuple[float, ...], ...], ...] = ()

    def problems(self) -> list[str]:
        for ring in self.coordinates:
            for point in ring:
                if len(point) != 2:
                    return ["each point must be identified by two values"]
        return []

    def describe(self) -> str:
        rings = []
        for ring in self.coordinates:
            points = ",".join("(" + ",".join(str(v) for v in point) + ")" for point in ring)
            rings.append(f"[{points}]")
        return ",".join(rings)


class CivicAddressElement(Message):
    # caType and caValue follow section 3.4 of IETF RFC 4776.
    ca_type: int = Field(alias="caType")
    ca_value: str = Field(alias="caValue")

    def problems(self) -> list[str]:
        if not self.ca_value:
            return ["Empty caValue in civicAddressElement"]
        return []


class LocationConstraints(Message):
    """Either a country code with civic address elements, or a geographic area."""

    country_code: str | None = Field(default=None, alias="countryCode")
    civic_address_element: tuple[CivicAddressElement, ...] = Field(
        default=(), alias="civicAddressElement"
    )
    area: Polygon | None = None

    def problems(self) -> list[str]:
        problems = []
        if self.area is not None:
            if self.country_code or self.civic_address_element:
                problems.append("countryCode and civicAddressElement must be empty with area")
            problems.extend(self.area.problems())
        else:
            if not self.country_code:
                problems.append("Empty countryCode in LocationConstraints")
            if not self.civic_address_element:
                problems.append("Empty civicAddressElement in LocationConstraints")
        problems.extend(_collect(self.civic_address_element))
        return problems

    def describe(self) -> str:
        if self.area is not None:
            return f"area: {self.area.describe()}"
        civics = ",".join(f"{c.ca_type} {c.ca_value}" for c in self.civic_address_element)
        return f"country: {self.country_code or 'not-present'}, civic addresses: {civics}"


class AppCharcs(Message):
    """
    System resources expected to be consumed by an application.

    memory and storage are in Mbytes, latency in milliseconds and bandwidth in
    kbit/s. serviceCont is 0 (not required) or 1 (required).
    """

    memory: int | None = None
    storage: int | None = None
    latency: int | None = None
    bandwidth: int | None = None
    service_cont: int | None = Field(default=None, alias="serviceCont")

    def problems(self) -> list[str]:
        if self.service_cont is not None and self.service_cont not in SERVICE_CONTINUITY_VALUES:
            return [f"invalid serviceCont value: {self.service_cont}"]
        return []

    def describe(self) -> str:
        continuity = {None: "not specified", 0: "not required", 1: "required"}.get(
            self.service_cont, "invalid value"
        )
        return (
            f"memory: {self.memory or 0} MB, storage: {self.storage or 0} MB, "
            f"latency: {self.latency or 0} ms, bandwidth: {self.bandwidth or 0} kb/s, "
            f"continuity {continuity}"
        )


class AppInfo(Message):
    """Application descriptor, as listed in the catalog."""

    app_d_id: str = Field(alias="appDId")
    app_name: str = Field(default="", alias="appName")
    app_provider: str = Field(default="", alias="appProvider")
    app_soft_version: str = Field(default="", alias="appSoftVersion")
    app_d_version: str = Field(default="", alias="appDVersion")
    app_description: str = Field(default="", alias="appDescription")
    app_location: tuple[LocationConstraints, ...] = Field(default=(), alias="appLocation")
    app_charcs: AppCharcs | None = Field(default=None, alias="appCharcs")

    def problems(self) -> list[str]:
        problems = _collect(self.app_location)
        if self.app_charcs is not None:
            problems.extend(self.app_charcs.problems())
        problems.extend(_too_long(self.app_name, "appName"))
        problems.extend(_too_long(self.app_provider, "appProvider"))
        problems.extend(_too_long(self.app_soft_version, "appSoftVersion"))
        problems.extend(_too_long(self.app_d_version, "appDVersion"))
        problems.extend(
            _too_long(self.app_description, "appDescription", MAX_DESCRIPTION_LENGTH)
        )
        return problems

    def describe(self) -> str:
        locations = ",".join(loc.describe() for loc in self.app_location)
        charcs = self.app_charcs.describe() if self.app_charcs is not None else "unspecified"
        return (
            f"appDId: {self.app_d_id}, appName: {self.app_name}, "
            f"appProvider: {self.app_provider}, appSoftVersion: {self.app_soft_version}, "
            f"appDVersion: {self.app_d_version}, appDescription: {self.app_description}, "
            f"appLocation: {locations}, appCharcs: {charcs}"
        )


class VendorSpecificExt(Message):
    # The rest of the vendor extension is not defined by the standard.
    vendor_id: str = Field(alias="vendorId")

    def problems(self) -> list[str]:
        return _too_long(self.vendor_id, "vendorId")


class AppList(Message):
    """One catalog entry: a descriptor plus an optional vendor extension."""

    app_info: AppInfo = Field(alias="appInfo")
    vendor_specific_ext: VendorSpecificExt | None = Field(
        default=None, alias="vendorSpecificExt"
    )

    @property
    def vendor_id(self) -> str:
        if self.vendor_specific_ext is None:
            return ""
        return self.vendor_specific_ext.vendor_id

    def problems(self) -> list[str]:
        problems = self.app_info.problems()
        if self.vendor_specific_ext is not None:
            problems.extend(self.vendor_specific_ext.problems())
        return problems

    def describe(self) -> str:
        description = f"appInfo: {self.app_info.describe()}"
        if self.vendor_specific_ext is not None:
            description += f", vendorSpecificExt: {self.vendor_specific_ext.vendor_id}"
        return description


class ApplicationList(Message):
    """List of user applications available to the device application."""

    app_list: tuple[AppList, ...] = Field(default=(), alias="appList")

    def problems(self) -> list[str]:
        return _collect(self.app_list)

    def describe(self) -> str:
        return "\n".join(entry.describe() for entry in self.app_list)


class ApplicationListFilter(Message):
    """
    Query of the application list.

    Each text field holds a comma-separated set of accepted values; an empty or
    absent field matches everything.
    """

    app_name: str | None = Field(default=None, alias="appName")
    app_provider: str | None = Field(default=None, alias="appProvider")
    app_soft_version: str | None = Field(default=None, alias="appSoftVersion")
    vendor_id: str | None = Field(default=None, alias="vendorId")
    service_cont: int | None = Field(default=None, alias="serviceCont")

    def problems(self) -> list[str]:
        problems: list[str] = []
        for field_name, alias in (
            ("app_name", "appName"),
            ("app_provider", "appProvider"),
            ("app_soft_version", "appSoftVersion"),
            ("vendor_id", "vendorId"),
        ):
            for value in self.accepted(field_name):
                problems.extend(_too_long(value, alias))
        if self.service_cont is not None and self.service_cont not in SERVICE_CONTINUITY_VALUES:
            problems.append(f"invalid serviceCont value: {self.service_cont}")
        return problems

    def accepted(self, field_name: str) -> frozenset[str]:
        """Accepted values for a text field; empty means any value."""
        raw = getattr(self, field_name) or ""
        return frozenset(value.strip() for value in raw.split(",") if value.strip())


class UserAppInstanceInfo(Message):
    app_instance_id: str | None = Field(default=None, alias="appInstanceId")
    reference_uri: str | None = Field(default=None, alias="referenceURI")
    app_location: LocationConstraints | None = Field(default=None, alias="appLocation")

    def problems(self) -> list[str]:
        problems = _too_long(self.app_instance_id, "appInstanceId")
        if self.app_location is not None:
            problems.extend(self.app_location.problems())
        return problems


class AppContextAppInfo(Message):
    """
    Application information carried by an application context.

    appDId is present only when a catalog application is requested, otherwise
    appPackageSource may point at the package to onboard.
    """

    app_d_id: str | None = Field(default=None, alias="appDId")
    app_name: str = Field(alias="appName")
    app_provider: str = Field(alias="appProvider")
    app_soft_version: str | None = Field(default=None, alias="appSoftVersion")
    app_d_version: str = Field(alias="appDVersion")
    app_description: str | None = Field(default=None, alias="appDescription")
    user_app_instance_info: tuple[UserAppInstanceInfo, ...] = Field(
        default=(), alias="userAppInstanceInfo"
    )
    app_package_source: str | None = Field(default=None, alias="appPackageSource")

    def problems(self) -> list[str]:
        problems = _collect(self.user_app_instance_info)
        problems.extend(_too_long(self.app_d_id, "appDId"))
        problems.extend(_too_long(self.app_name, "appName"))
        problems.extend(_too_long(self.app_provider, "appProvider"))
        problems.extend(_too_long(self.app_soft_version, "appSoftVersion"))
        problems.extend(_too_long(self.app_d_version, "appDVersion"))
        problems.extend(
            _too_long(self.app_description, "appDescription", MAX_DESCRIPTION_LENGTH)
        )
        if self.app_d_id is not None and self.app_package_source is not None:
            problems.append("appPackageSource must be absent with appDId")
        return problems


class AppContext(Message):
    """An application context, as exchanged with the device application."""

    context_id: str | None = Field(default=None, alias="contextId")
    associate_dev_app_id: str = Field(alias="associateDevAppId")
    callback_reference: str | None = Field(default=None, alias="callbackReference")
    app_location_updates: bool = Field(default=False, alias="appLocationUpdates")
    app_auto_instantiation: bool = Field(default=False, alias="appAutoInstantiation")
    app_info: AppContextAppInfo = Field(alias="appInfo")

    @classmethod
    def request_from_name_provider(cls, app_name: str, app_provider: str) -> "AppContext":
        """Minimal creation request for an application with a generated device app id."""
        return cls(
            associate_dev_app_id=uuid.uuid4().hex,
            app_info=AppContextAppInfo(
                app_name=app_name,
                app_provider=app_provider,
                app_d_version="",
            ),
        )

    def problems(self) -> list[str]:
        problems = self.app_info.problems()
        problems.extend(_too_long(self.context_id, "contextId"))
        problems.extend(_too_long(self.associate_dev_app_id, "associateDevAppId"))
        return problems

    def request_problems(self) -> list[str]:
        """Structural problems plus those that make it unfit as a creation request."""
        problems = self.problems()
        if self.context_id is not None:
            problems.append("contextId must be absent in a request")
        if self.app_info.user_app_instance_info:
            problems.append("userAppInstanceInfo must be empty in a request")
        return problems

    def valid_request(self) -> None:
        problems = self.request_problems()
        if problems:
            raise ValidationFailed(problems)

    def identical_except_callback_reference(self, other: "AppContext") -> bool:
        return self.model_copy(update={"callback_reference": None}) == other.model_copy(
            update={"callback_reference": None}
        )


class ProblemDetails(Message):
    """Error body, as in IETF RFC 7807."""

    type: str | None = None
    title: str | None = None
    status: int
    detail: str
