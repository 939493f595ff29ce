from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from callscope.data.massive import MassiveClient, parse_next_url
from callscope.options.models import Contract
from callscope.utils.logging import DiagnosticLog

logger = logging.getLogger(__name__)

MAX_PAGES = 15
PAGE_SIZE = 250


@dataclass(frozen=True)
class ChainPage:
    number: int  # 1-based
    contracts: list[Contract]
    underlying_asset: Mapping[str, Any] | None = field(default=None, repr=False)
    rows_seen: int = 0


def iter_chain_pages(
    client: MassiveClient,
    ticker: str,
    *,
    max_pages: int = MAX_PAGES,
    page_size: int = PAGE_SIZE,
    diag: DiagnosticLog | None = None,
) -> Iterator[ChainPage]:
    """
    Walk the cursor-paginated call chain for `ticker`, one page per iteration.

    Stops when `next_url` is absent/unparsable or after `max_pages` pages. A
    non-success page raises UpstreamError out of the generator; callers must
    not use anything accumulated from earlier pages in that case.
    """
    url: str | None = client.chain_url(ticker, page_size=page_size)
    page = 0
    while url and page < int(max_pages):
        page += 1
        data = client.get_json(url)

        raw_rows = data.get("results")
        rows = raw_rows if isinstance(raw_rows, list) else []
        contracts: list[Contract] = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            c = Contract.from_row(row)
            if not c.is_call:
                if diag is not None:
                    diag.emit("chain.row_skipped", page=page, reason="not_call", contract=c.ticker, type=c.contract_type)
                continue
            contracts.append(c)

        ua = data.get("underlying_asset")
        yield ChainPage(
            number=page,
            contracts=contracts,
            underlying_asset=ua if isinstance(ua, Mapping) else None,
            rows_seen=len(rows),
        )

        raw_next = data.get("next_url")
        url = parse_next_url(raw_next)
        if raw_next and url is None and diag is not None:
            diag.emit("chain.cursor_unparsable", page=page, next_url=repr(raw_next))

    if url and diag is not None:
        diag.emit("chain.page_ceiling", pages=page, max_pages=int(max_pages))
    logger.debug("Fetched %d chain page(s) for %s", page, ticker)


def paginate_calls(
    client: MassiveClient,
    ticker: str,
    *,
    max_pages: int = MAX_PAGES,
    page_size: int = PAGE_SIZE,
    diag: DiagnosticLog | None = None,
) -> list[Contract]:
    """All call contracts across the (bounded) chain listing."""
    out: list[Contract] = []
    for page in iter_chain_pages(client, ticker, max_pages=max_pages, page_size=page_size, diag=diag):
        out.extend(page.contracts)
    return out
