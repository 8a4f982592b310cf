# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Builders for on-disk DSC resource module repositories."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

MODULE_NAME = "xDemo"
RESOURCE_NAME = "MSFT_xDemo"

SCHEMA_MOF = """\
[ClassVersion("1.0.0.0"), FriendlyName("xDemo")]
class MSFT_xDemo : OMI_BaseResource
{
    [Key, Description("Name of the item.")] String Name;
    [Write, ValueMap{"Present","Absent"}, Values{"Present","Absent"}] String Ensure;
    [Read, Description("Current value.")] String Current;
};
"""

RESOURCE_PSM1 = """\
function Get-TargetResource
{
    [CmdletBinding()]
    [OutputType([System.Collections.Hashtable])]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name
    )

    return @{ Name = $Name; Ensure = 'Present'; Current = 'x' }
}

function Set-TargetResource
{
    [CmdletBinding()]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name,

        [ValidateSet('Present', 'Absent')]
        [System.String]
        $Ensure = 'Present'
    )
}

function Test-TargetResource
{
    [CmdletBinding()]
    [OutputType([System.Boolean])]
    param
    (
        [Parameter(Mandatory = $true)]
        [System.String]
        $Name,

        [ValidateSet('Present', 'Absent')]
        [System.String]
        $Ensure = 'Present'
    )

    return $true
}

Export-ModuleMember -Function *-TargetResource
"""

MANIFEST_PSD1 = """\
@{
    ModuleVersion = '1.0.0.0'
    PowerShellVersion = '4.0'
}
"""



def build_module_repo(base: Path) -> Path:
    """Create a minimal, well-formed DSC resource module repository under ``base``."""

    root = base / MODULE_NAME
    resource = root / "DSCResources" / RESOURCE_NAME
    resource.mkdir(parents=True)
    (root / f"{MODULE_NAME}.psd1").write_text(MANIFEST_PSD1, encoding="utf-8")
    (resource / f"{RESOURCE_NAME}.psm1").write_text(RESOURCE_PSM1, encoding="utf-8")
    (resource / f"{RESOURCE_NAME}.schema.mof").write_text(SCHEMA_MOF, encoding="utf-8")
    return root


def write_opt_ins(root: Path, suites: Iterable[str]) -> Path:
    path = root / ".MetaTestOptIn.json"
    path.write_text(json.dumps(list(suites)) + "\n", encoding="utf-8")
    return path
