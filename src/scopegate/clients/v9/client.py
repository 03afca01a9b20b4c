"""Generation 9 client — the ``elasticsearch`` 9.x package, same dialect as 8."""

from __future__ import annotations

from typing import ClassVar

import elasticsearch

from scopegate.clients.v8.client import Elasticsearch8Client


class Elasticsearch9Client(Elasticsearch8Client):
    """Client for Elasticsearch 9.x clusters."""

    async_client_class: ClassVar[type] = elasticsearch.AsyncElasticsearch
    api_error_class: ClassVar[type[Exception]] = elasticsearch.ApiError

    @property
    def generation(self) -> int:
        return 9
