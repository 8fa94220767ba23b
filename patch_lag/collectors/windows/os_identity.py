"""Collect the running Windows product caption, feature version and OS build."""

import json

from ...errors import EnvironmentQueryFailed
from ...models.schema import OSIdentity
from ..base import BaseCollector
from . import _utils

# Caption comes from CIM because the registry ProductName still reads
# "Windows 10" on Windows 11. DisplayVersion ("22H2") replaced ReleaseId
# ("2009") from 20H2 on; Server 2019 only has ReleaseId ("1809").
_IDENTITY_PS = (
    "$cv = Get-ItemProperty 'HKLM:\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion'; "
    "[pscustomobject]@{"
    "Caption = (Get-CimInstance Win32_OperatingSystem).Caption; "
    "DisplayVersion = $cv.DisplayVersion; "
    "ReleaseId = $cv.ReleaseId; "
    "CurrentBuild = $cv.CurrentBuild; "
    "UBR = $cv.UBR"
    "} | ConvertTo-Json"
)


def _field(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value).strip()


class OsIdentityCollector(BaseCollector):
    name = "windows.os_identity"

    def _collect(self) -> OSIdentity:
        raw = _utils.run_powershell(_IDENTITY_PS)
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise EnvironmentQueryFailed(f"{self.name}: unreadable PowerShell output {raw!r}") from exc
        if not isinstance(data, dict):
            raise EnvironmentQueryFailed(f"{self.name}: expected a JSON object, got {raw!r}")
        return self._to_identity(data)

    def _to_identity(self, data: dict) -> OSIdentity:
        caption = _field(data, "Caption")
        version = _field(data, "DisplayVersion") or _field(data, "ReleaseId")
        current = _field(data, "CurrentBuild")
        ubr     = _field(data, "UBR")

        missing = [
            name for name, value in (
                ("Caption", caption),
                ("DisplayVersion/ReleaseId", version),
                ("CurrentBuild", current),
                ("UBR", ubr),
            ) if not value
        ]
        if missing:
            raise EnvironmentQueryFailed(
                f"{self.name}: missing OS property {', '.join(missing)}"
            )

        return OSIdentity(product_name=caption, version_label=version, build=f"{current}.{ubr}")
