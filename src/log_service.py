import logging
from dataclasses import dataclass, field

from log_analyzer import AnalysisResult, analyse, result_to_dict
from log_parser import ParseRejection, parse_line_strict

DEFAULT_ENCODING = "utf-8"
BUFFER_SIZE = 1024 * 1024
BOM = "\ufeff"
MAX_RECORDED_FAILURES = 1000
SAMPLE_FAILURES_IN_REPORT = 5

logger = logging.getLogger(__name__)


@dataclass
class LogAnalysis:
    result: AnalysisResult
    total_lines: int
    skipped_lines: int
    failed_attempts: dict = field(default_factory=dict)

    @property
    def parsed_lines(self):
        return self.total_lines - self.skipped_lines


def read_lines(filepath):
    with open(filepath, "r", encoding=DEFAULT_ENCODING, buffering=BUFFER_SIZE) as f:
        for line_num, line in enumerate(f, 1):
            if line_num == 1 and line and line[0] == BOM:
                line = line[1:]
            yield line.rstrip("\r\n")


def record_failure(failed_attempts, line, reason):
    if line in failed_attempts:
        failed_attempts[line]["count"] += 1
    elif len(failed_attempts) < MAX_RECORDED_FAILURES:
        failed_attempts[line] = {"count": 1, "reason": reason}


def analyse_lines(lines, parser=parse_line_strict, analyser=analyse):
    """
    Parse every line, drop the malformed ones and analyse the rest.

    ``parser`` may either raise ParseRejection or return None for a
    malformed line, so both parse_line_strict and parse_line fit.
    """
    records = []
    failed_attempts = {}
    total_lines = 0
    skipped_lines = 0

    for line_num, line in enumerate(lines, 1):
        total_lines += 1
        try:
            record = parser(line)
            reason = "rejected"
        except ParseRejection as e:
            record = None
            reason = e.reason

        if record is None:
            skipped_lines += 1
            record_failure(failed_attempts, line, reason)
            logger.warning("Skipping malformed line %d: %s", line_num, line)
            continue

        records.append(record)

    if skipped_lines:
        logger.warning(
            "Skipped %d malformed line(s) out of %d total lines", skipped_lines, total_lines
        )
    logger.debug("Analysing %d parsed records", len(records))

    return LogAnalysis(
        result=analyser(records),
        total_lines=total_lines,
        skipped_lines=skipped_lines,
        failed_attempts=failed_attempts,
    )


def analyse_log_file(filepath, parser=parse_line_strict, analyser=analyse):
    logger.info("Analyzing: %s", filepath)
    return analyse_lines(read_lines(filepath), parser=parser, analyser=analyser)


def build_report(analysis, filepath, elapsed_time):
    total_lines = analysis.total_lines
    if total_lines > 0:
        success_rate = f"{(analysis.parsed_lines / total_lines * 100):.1f}%"
    else:
        success_rate = "0%"

    return {
        "summary": {
            "file": str(filepath),
            "total_lines": total_lines,
            "parsed_lines": analysis.parsed_lines,
            "skipped_lines": analysis.skipped_lines,
            "parsing_success_rate": success_rate,
            "analysis_time_seconds": round(elapsed_time, 2),
        },
        "traffic_analysis": result_to_dict(analysis.result),
        "failures": {
            "failed_attempts_count": len(analysis.failed_attempts),
            "sample_failures": dict(
                list(analysis.failed_attempts.items())[:SAMPLE_FAILURES_IN_REPORT]
            ),
        },
    }
