"""Pure helpers over already-fetched rows.

Nothing in here touches the database or the request; callers hand in model
instances (or any object exposing the same attributes) and get plain values
back.
"""
import time

COURSE_COLORS = [
    '#6c5ce7', '#a29bfe', '#fd79a8', '#fdcb6e',
    '#e17055', '#00b894', '#00cec9', '#0984e3',
    '#6c5ce7', '#fd79a8', '#e84393', '#00b894',
]

STATUS_CYCLE = {
    'active': 'completed',
    'completed': 'archived',
    'archived': 'active',
}

ALL = 'all'


def next_status(status):
    """active -> completed -> archived -> active; anything unknown restarts at active."""
    return STATUS_CYCLE.get(status, 'active')


def _contains(haystack, needle):
    return bool(haystack) and needle in haystack.lower()


def filter_courses(courses, search='', status=ALL):
    term = (search or '').strip().lower()
    status = status or ALL
    out = []
    for c in courses:
        if term and not (_contains(c.title, term) or _contains(c.description, term)):
            continue
        if status != ALL and c.status != status:
            continue
        out.append(c)
    return out


def filter_notes(notes, search='', course_id=ALL):
    """Match ``search`` against note title, note content and the parent course title."""
    term = (search or '').strip().lower()
    course_id = ALL if course_id in (None, '', ALL) else str(course_id)
    out = []
    for n in notes:
        if term:
            course_title = getattr(getattr(n, 'course', None), 'title', None)
            if not (_contains(n.title, term) or _contains(n.content, term) or _contains(course_title, term)):
                continue
        if course_id != ALL and str(n.course_id) != course_id:
            continue
        out.append(n)
    return out


def dashboard_stats(courses, notes_count):
    courses = list(courses)
    return {
        'total_courses': len(courses),
        'active_courses': sum(1 for c in courses if c.status == 'active'),
        'completed_courses': sum(1 for c in courses if c.status == 'completed'),
        'total_notes': notes_count or 0,
    }


def file_extension(filename):
    if not filename or '.' not in filename:
        return ''
    ext = filename.rsplit('.', 1)[1]
    return ''.join(ch for ch in ext if ch.isalnum())


def build_storage_path(owner_id, course_id, filename, now_ms=None):
    """Return ``{owner}/{course}/{epoch_millis}.{ext}``; files without an extension get no suffix."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ext = file_extension(filename)
    name = f"{now_ms}.{ext}" if ext else str(now_ms)
    return f"{owner_id}/{course_id}/{name}"


def format_file_size(size):
    if not size:
        return '0 B'
    units = ['B', 'KB', 'MB', 'GB']
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    # 1.50 -> 1.5, 2.00 -> 2
    text = f"{round(value, 2):.2f}".rstrip('0').rstrip('.')
    return f"{text} {units[i]}"
