"""Structured-value extraction utilities."""

from .repo_extractor import RepoInfo, get_repo_infos

__all__ = ["RepoInfo", "get_repo_infos"]
