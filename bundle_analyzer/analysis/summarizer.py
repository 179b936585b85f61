"""
Default summarization and report construction over raw concat stats.

Each raw stats file (<name>.json) describes one concatenated output:

    {"outputFile": "assets/vendor.js", "sizes": {"path/to/input.js": 1234}}

summarize_all() writes a <name>.out.json summary next to every raw file
that is not ignored; create_output() renders the summaries as one HTML page.
"""
import html
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Protocol

from ..core.models import IgnoreRules


logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = '.out.json'


class Summarizer(Protocol):
    def summarize_all(self, stats_dir: Path, ignore_rules: IgnoreRules) -> int:
        ...

    def create_output(self, stats_dir: Path) -> str:
        ...


def _raw_stats_files(stats_dir: Path) -> List[Path]:
    return sorted(
        p for p in Path(stats_dir).glob('*.json')
        if not p.name.endswith(SUMMARY_SUFFIX)
    )


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class ConcatStatsSummarizer:
    """Summarizes per-input sizes of every concatenated bundle"""

    def summarize_all(self, stats_dir: Path, ignore_rules: IgnoreRules) -> int:
        """
        Write one summary per raw stats file.

        Args:
            stats_dir: Raw stats directory
            ignore_rules: Bundles whose output file matches are skipped

        Returns:
            Number of summaries written
        """
        stats_dir = Path(stats_dir)
        written = 0

        for summary in stats_dir.glob(f'*{SUMMARY_SUFFIX}'):
            summary.unlink()

        for stats_file in _raw_stats_files(stats_dir):
            with open(stats_file, 'r', encoding='utf-8') as f:
                raw = json.load(f)

            output_file = raw.get('outputFile') or stats_file.stem
            if ignore_rules.matches(output_file) or ignore_rules.matches(stats_file.name):
                logger.debug(f"Ignoring stats for {output_file}")
                continue

            summary = self.summarize(output_file, raw.get('sizes') or {})
            target = stats_file.with_name(stats_file.stem + SUMMARY_SUFFIX)
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(summary, f, indent=2, sort_keys=True)
            written += 1

        logger.debug(f"Summarized {written} bundle(s) in {stats_dir}")
        return written

    @staticmethod
    def summarize(output_file: str, sizes: Dict[str, int]) -> Dict[str, Any]:
        total = sum(int(size) for size in sizes.values())
        files = [
            {
                'path': path,
                'size': int(size),
                'percentage': round(100.0 * int(size) / total, 2) if total else 0.0
            }
            for path, size in sorted(sizes.items(), key=lambda item: (-int(item[1]), item[0]))
        ]
        return {
            'outputFile': output_file,
            'totalSize': total,
            'fileCount': len(files),
            'files': files
        }

    def create_output(self, stats_dir: Path) -> str:
        summaries = []
        for summary_file in sorted(Path(stats_dir).glob(f'*{SUMMARY_SUFFIX}')):
            with open(summary_file, 'r', encoding='utf-8') as f:
                summaries.append(json.load(f))

        if not summaries:
            raise ValueError(f"No summarized stats found in {stats_dir}")

        summaries.sort(key=lambda s: (-s['totalSize'], s['outputFile']))
        return self._render(summaries)

    def _render(self, summaries: List[Dict[str, Any]]) -> str:
        sections = []
        for summary in summaries:
            rows = "\n".join(
                f"<tr><td>{html.escape(entry['path'])}</td>"
                f"<td class=\"size\">{_format_size(entry['size'])}</td>"
                f"<td class=\"size\">{entry['percentage']:.2f}%</td></tr>"
                for entry in summary['files']
            )
            sections.append(f"""
        <section class="bundle">
            <h2>{html.escape(summary['outputFile'])}
                <small>{_format_size(summary['totalSize'])} in {summary['fileCount']} file(s)</small></h2>
            <table>
                <thead><tr><th>Input</th><th>Size</th><th>Share</th></tr></thead>
                <tbody>
{rows}
                </tbody>
            </table>
        </section>""")

        return f"""<!DOCTYPE html>
<html>
<head>
    <title>Bundle Analyzer</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 40px; }}
        table {{ border-collapse: collapse; width: 100%; }}
        th, td {{ text-align: left; padding: 4px 8px; border-bottom: 1px solid #eee; }}
        td.size {{ text-align: right; white-space: nowrap; }}
        h2 small {{ color: #666; font-weight: normal; }}
    </style>
</head>
<body>
    <h1>Bundle Analyzer</h1>
    {''.join(sections)}
</body>
</html>
"""
