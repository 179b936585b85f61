import re


DEFAULT_LIVERELOAD_URL = '/ember-cli-live-reload.js'

_BODY_CLOSE = re.compile(r'</body\s*>', re.IGNORECASE)


def inject_livereload(output: str, script_url: str = DEFAULT_LIVERELOAD_URL) -> str:
    """Add the live reload client script to a rendered report"""
    tag = f'<script src="{script_url}"></script>'
    if tag in output:
        return output

    match = None
    for match in _BODY_CLOSE.finditer(output):
        pass

    if match is None:
        return output + tag
    return output[:match.start()] + tag + output[match.start():]
