from __future__ import annotations

from storefront.app.models import Service


class ServiceController:
    def search_items(self, type_: str) -> list[Service]:
        return (
            Service.query.filter_by(type=type_, status=1)
            .order_by(Service.position.asc(), Service.id.asc())
            .all()
        )
