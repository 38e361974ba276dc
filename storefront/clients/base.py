"""Building blocks of the HTML clients.

A client renders one part of a page. It may consist of sub-clients whose
output is placed inside its own template, and it can cache what it renders.
Cached markup containing per-session content marks those parts as sections
(``<!-- name -->...<!-- name -->``) which are re-rendered on every request.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from flask import current_app, render_template, request

from storefront.app.common.errors import ClientError, StorefrontError
from storefront.app.common.fragment_cache import fragments
from storefront.app.common.i18n import translate

logger = logging.getLogger(__name__)

CLIENTS: dict[str, type["HtmlClient"]] = {}

GENERIC_ERROR = "A non-recoverable error occurred"


def register(path: str):
    """Make a client class available as sub-client `path`."""

    def decorator(cls):
        cls.path = path
        CLIENTS[path] = cls
        return cls

    return decorator


class View:
    """Data handed from the clients to the templates."""

    def __init__(self, params: dict[str, Any] | None = None, **attrs: Any):
        self._params = dict(params or {})
        self.__dict__.update(attrs)

    @classmethod
    def from_request(cls, **attrs: Any) -> "View":
        params = request.args.to_dict()
        params.update(request.view_args or {})
        return cls(params, **attrs)

    def param(self, name: str | None = None, default: Any = None) -> Any:
        if name is None:
            return dict(self._params)
        return self._params.get(name, default)

    def config(self, key: str, default: Any = None) -> Any:
        value = current_app.config.get(key)
        return default if value is None else value

    def get(self, name: str, default: Any = None) -> Any:
        return self.__dict__.get(name, default)

    def render(self, template: str) -> str:
        return render_template(template, view=self)


@dataclass
class CacheMeta:
    """Tags and expiry date collected while assembling cacheable output."""

    tags: list[str] = field(default_factory=list)
    expire: datetime | None = None

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def add_expire(self, date: datetime | None) -> None:
        if date is not None and (self.expire is None or date < self.expire):
            self.expire = date


class HtmlClient:
    path = ""
    # config key with the list of sub-client names
    subparts_key: str | None = None
    default_subparts: list[str] = []

    def __init__(self, view: View | None = None):
        self.view = view if view is not None else View.from_request()
        self._sub_clients: list[HtmlClient] | None = None

    @property
    def site(self) -> str:
        return current_app.config.get("SITE_CODE", "default")

    def set_view(self, view: View) -> "HtmlClient":
        self.view = view
        return self

    def get_sub_client(self, name: str) -> "HtmlClient":
        path = f"{self.path}/{name}"
        cls = CLIENTS.get(path)
        if cls is None:
            raise ClientError(f'Client "{path}" not available')
        return cls(self.view)

    def get_sub_client_names(self) -> list[str]:
        if self.subparts_key is None:
            return list(self.default_subparts)
        return list(current_app.config.get(self.subparts_key, self.default_subparts))

    def get_sub_clients(self) -> list["HtmlClient"]:
        if self._sub_clients is None:
            self._sub_clients = [self.get_sub_client(name) for name in self.get_sub_client_names()]
        return self._sub_clients

    def get_body(self, uid: str = "") -> str:
        return "".join(sub.set_view(self.view).get_body(uid) for sub in self.get_sub_clients())

    def get_header(self, uid: str = "") -> str:
        return "".join(sub.set_view(self.view).get_header(uid) for sub in self.get_sub_clients())

    def modify_body(self, content: str, uid: str) -> str:
        """Replace session dependent sections of cached body markup."""
        for sub in self.get_sub_clients():
            content = sub.set_view(self.view).modify_body(content, uid)
        return content

    def modify_header(self, content: str, uid: str) -> str:
        for sub in self.get_sub_clients():
            content = sub.set_view(self.view).modify_header(content, uid)
        return content

    def process(self) -> None:
        for sub in self.get_sub_clients():
            sub.set_view(self.view).process()

    def add_data(self, view: View, meta: CacheMeta) -> View:
        for sub in self.get_sub_clients():
            view = sub.add_data(view, meta)
        return view

    # --- caching ---

    def cache_key(self, kind: str, uid: str, prefixes: Iterable[str], confkey: str) -> str:
        prefixes = tuple(f"{p}_" for p in prefixes)
        params = {k: v for k, v in self.view.param().items() if k.startswith(prefixes)}
        config = {k: v for k, v in current_app.config.items() if k.startswith(confkey)}
        data = json.dumps(
            {"uid": uid, "site": self.site, "params": params, "config": config},
            sort_keys=True,
            default=str,
        )
        return f"{self.path}/{kind}:{hashlib.sha1(data.encode('utf-8')).hexdigest()}"

    def get_cached(self, kind: str, uid: str, prefixes: Iterable[str], confkey: str) -> str | None:
        return fragments.get(self.cache_key(kind, uid, prefixes, confkey))

    def set_cached(self, kind: str, uid: str, prefixes: Iterable[str], confkey: str, html: str, meta: CacheMeta) -> None:
        fragments.set(self.cache_key(kind, uid, prefixes, confkey), html, meta.tags, meta.expire)

    @staticmethod
    def replace_section(content: str, replacement: str, section: str) -> str:
        marker = f"<!-- {section} -->"
        start = content.find(marker)
        if start == -1:
            return content

        end = content.find(marker, start + len(marker))
        if end == -1:
            logger.error('No end marker for section "%s" found', section)
            return content

        return content[: start + len(marker)] + str(replacement) + content[end:]

    # --- view data helpers ---

    @staticmethod
    def add_meta_items(items: Iterable[Any], meta: CacheMeta, domain: str = "product") -> None:
        now = datetime.utcnow()
        for item in items:
            meta.add_tag(domain)
            meta.add_tag(f"{domain}-{item.id}")
            meta.add_expire(getattr(item, "end_date", None))
            start = getattr(item, "start_date", None)
            if start is not None and start > now:
                meta.add_expire(start)

    @staticmethod
    def get_client_params(params: dict[str, Any], prefixes: Iterable[str] = ("f", "l", "d")) -> dict[str, Any]:
        prefixes = tuple(f"{p}_" for p in prefixes)
        return {k: v for k, v in params.items() if k.startswith(prefixes)}

    def add_error(self, view: View, list_name: str, err: Exception) -> None:
        """Append a shopper-facing message for `err` to the view's error list."""
        if isinstance(err, StorefrontError):
            message = translate(err.domain, str(err))
        else:
            message = translate("client", GENERIC_ERROR)
            self.log_exception(err)
        setattr(view, list_name, view.get(list_name, []) + [message])

    def log_exception(self, err: Exception) -> None:
        current_app.logger.error("Error in HTML client %s: %s", self.path, err, exc_info=err)
