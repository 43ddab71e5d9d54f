"""YAML manifest describing several repositories to mirror"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from branchmirror.git.urls import is_valid_remote_url, repo_name_from_url
from branchmirror.naming import validate_folder_name


class RepositoryEntry(BaseModel):
    """A repository to mirror."""

    url: str = Field(..., description="SSH or HTTPS URL of the repository")
    name: Optional[str] = Field(
        None, description="Folder name under the mirror root (derived from url)"
    )
    all_branches: bool = Field(False, description="Clone every branch")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_remote_url(v):
            raise ValueError(
                f"'{v}' is not a valid repository URL (use SSH or HTTPS form)"
            )
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_folder_name(v)

    @property
    def folder_name(self) -> str:
        return self.name or repo_name_from_url(self.url)


class MirrorManifest(BaseModel):
    """Set of repositories mirrored under a common root."""

    root: Optional[str] = Field(None, description="Mirror root directory")
    repositories: List[RepositoryEntry] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "MirrorManifest":
        """Alternative constructor that loads from YAML string"""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Manifest must be a mapping with a 'repositories' list")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "MirrorManifest":
        with open(path, "r") as f:
            return cls.from_yaml(f.read())
