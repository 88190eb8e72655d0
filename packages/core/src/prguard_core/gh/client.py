"""Authenticated forge transport built on PyGithub's requester.

PyGithub already handles authentication, timeouts, retries on transient
failures and JSON decoding; this adapter only exposes the raw REST verbs the
rest of prguard needs. GithubException and the requests errors PyGithub lets
through (timeouts, dropped connections) both become ForgeError.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from github import Auth, Github, GithubException

from prguard_core.errors import ForgeError, ForgeNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
LONG_TIMEOUT = 20


class ForgeClient:
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = LONG_TIMEOUT,
        retry: int | None = None,
    ):
        kwargs: dict[str, Any] = {"auth": Auth.Token(token), "base_url": base_url, "timeout": timeout}
        if retry is not None:
            kwargs["retry"] = retry
        self._gh = Github(**kwargs)

    @property
    def github(self) -> Github:
        return self._gh

    def fetch(self, path: str, params: dict | None = None, fail_fatal: bool = True) -> Any:
        """GET path and return the decoded body.

        With fail_fatal=False an API error is logged and None returned, for
        call sites that prefer partial results over aborting.
        """
        try:
            return self._request("GET", path, params=params)
        except ForgeError as e:
            if fail_fatal:
                raise
            logger.warning("GET %s failed (status %s), continuing without it", path, e.status)
            return None

    def post(self, path: str, fields: dict | None = None) -> Any:
        return self._request("POST", path, body=fields or {})

    def put(self, path: str, fields: dict | None = None) -> Any:
        return self._request("PUT", path, body=fields or {})

    def delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    def close(self) -> None:
        self._gh.close()

    def _request(self, verb: str, path: str, params: dict | None = None, body: dict | None = None) -> Any:
        logger.debug("%s %s params=%s", verb, path, params)
        try:
            _, data = self._gh.requester.requestJsonAndCheck(verb, path, parameters=params, input=body)
        except GithubException as e:
            context = {"verb": verb, "path": path, "status": e.status, "data": e.data}
            if e.status == 404:
                raise ForgeNotFoundError(
                    f"{verb} {path}: not found", status=e.status, data=e.data, context=context
                ) from e
            raise ForgeError(f"{verb} {path} failed", status=e.status, data=e.data, context=context) from e
        except requests.exceptions.RequestException as e:
            context = {"verb": verb, "path": path, "status": None, "error": repr(e)}
            raise ForgeError(f"{verb} {path} failed: {e}", status=None, context=context) from e
        return data
