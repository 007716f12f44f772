from collections import Counter
from dataclasses import dataclass
from typing import NamedTuple, Tuple

TOP_N_RESULTS = 3


class UrlStatistic(NamedTuple):
    url: str
    count: int


class AddressStatistic(NamedTuple):
    address: str
    count: int


@dataclass(frozen=True)
class AnalysisResult:
    unique_address_count: int
    top_urls: Tuple[UrlStatistic, ...]
    top_addresses: Tuple[AddressStatistic, ...]


def rank_top_n(values, n=TOP_N_RESULTS):
    """
    Count values and return the n most frequent as (value, count) pairs.

    Counter keeps keys in first-occurrence order and sorted() is stable, so
    equal counts stay in the order their keys first appeared in the input.
    """
    counts = Counter(values)
    return sorted(counts.items(), key=lambda item: -item[1])[:n]


def analyse(records) -> AnalysisResult:
    records = list(records)

    addresses = [record.client_address for record in records]
    paths = [record.request_path for record in records]

    top_urls = tuple(UrlStatistic(url, count) for url, count in rank_top_n(paths))
    top_addresses = tuple(
        AddressStatistic(address, count) for address, count in rank_top_n(addresses)
    )

    return AnalysisResult(
        unique_address_count=len(set(addresses)),
        top_urls=top_urls,
        top_addresses=top_addresses,
    )


def result_to_dict(result):
    return {
        "unique_ips": result.unique_address_count,
        "top_urls": [[url, count] for url, count in result.top_urls],
        "top_ips": [[address, count] for address, count in result.top_addresses],
    }
