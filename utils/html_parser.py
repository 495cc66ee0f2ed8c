"""HTML Parser for the university's published class timetable pages."""

from bs4 import BeautifulSoup
import logging
import re

from models.time_slot import DAY_LETTERS, parse_day_letters, iter_days

logger = logging.getLogger(__name__)

# "INGENIA M12-14", "19207 W8-10 J10-12": room first, then day letters
ROOM_PREFIX = re.compile(r'^(\S+)\s+[%s]' % ''.join(DAY_LETTERS))
SCHEDULE_PATTERN = re.compile(r'([%s]+)(\d+)-(\d+)' % ''.join(DAY_LETTERS))
SUBJECT_PATTERN = re.compile(r'(.+?)\s*\((\d+)\)')
OPTION_PATTERN = re.compile(r"o\[\d+\s*\]\s*=\s*new Option\s*\(\s*'([^']+)'\s*,\s*'([^']+)'\s*\)")


def parse_timetable_html(html_content):
    """
    Parse a saved "programación académica" page into a catalog dict.

    Args:
        html_content: Raw HTML string containing ``table#prtTb``

    Returns:
        dict with faculty, program, semester, fetched_on and subjects;
        subjects is empty when the page has no timetable table.
    """
    soup = BeautifulSoup(html_content, 'html.parser')

    result = {
        'faculty': '',
        'program': {'code': '', 'name': ''},
        'semester': '',
        'fetched_on': '',
        'subjects': []
    }

    table = soup.find('table', id='prtTb')
    if not table:
        return result

    result.update(parse_header(table))
    result['subjects'] = parse_subjects(table)
    return result


def parse_header(table):
    """Read faculty/program/semester/date from the header cell of the table."""
    cell = table.find('td', attrs={'colspan': '6'})
    if not cell:
        return {}

    text = cell.get_text('\n')

    faculty = re.search(r'Facultad:\s*(.+)', text, re.IGNORECASE)
    program = re.search(r'Programa:\s*\[(\d+)\]\s*(.+)', text, re.IGNORECASE)
    semester = re.search(r'Semestre:\s*(\d+)', text, re.IGNORECASE)
    fetched_on = re.search(r'Fecha:\s*(.+)', text, re.IGNORECASE)

    return {
        'faculty': faculty.group(1).strip() if faculty else '',
        'program': {
            'code': program.group(1) if program else '',
            'name': program.group(2).strip() if program else ''
        },
        'semester': semester.group(1) if semester else '',
        'fetched_on': fetched_on.group(1).strip() if fetched_on else ''
    }


def parse_subjects(table):
    """
    Collect subjects and their groups from the 6-column data rows.

    Row layout: Subject "Name (code)", Group, Max capacity, Available seats,
    Schedule, Professor. Rows for the same code are merged in page order.
    """
    subjects = {}

    for row in table.find_all('tr'):
        cells = row.find_all('td')
        if len(cells) != 6:
            continue

        subject_text = cells[0].get_text(strip=True)
        match = SUBJECT_PATTERN.match(subject_text)
        if not match:
            continue

        name = match.group(1).strip()
        code = match.group(2)
        group_number = cells[1].get_text(strip=True)
        capacity_max = cells[2].get_text(strip=True)
        capacity_available = cells[3].get_text(strip=True)
        professor = cells[5].get_text(strip=True)

        if code not in subjects:
            subjects[code] = {'code': code, 'name': name, 'groups': []}

        subjects[code]['groups'].append({
            'number': group_number.lstrip('0') or group_number,
            'capacity_max': int(capacity_max) if capacity_max.isdigit() else 0,
            'capacity_available': int(capacity_available) if capacity_available.isdigit() else 0,
            'time_slots': parse_schedule_text(cells[4].get_text(' ', strip=True)),
            'professor': professor or None
        })

    return list(subjects.values())


def parse_schedule_text(text):
    """
    Parse a schedule cell into slot dicts.

    Handles:
    - "MJ6-8"                             Tuesday and Thursday 6 to 8
    - "19314 MJ6-8"                       same, in room 19314
    - "INGENIA M12-14; 19213 J10-12"      several slots separated by ';'
    - "19207 W8-10 J10-12"                one room, several slots
    """
    slots = []
    if not text or not text.strip():
        return slots

    for segment in text.split(';'):
        segment = segment.strip()
        room_match = ROOM_PREFIX.match(segment)
        room = None
        if room_match and not SCHEDULE_PATTERN.fullmatch(room_match.group(1)):
            room = room_match.group(1)

        for match in SCHEDULE_PATTERN.finditer(segment):
            letters, start, end = match.group(1), int(match.group(2)), int(match.group(3))
            if start >= end:
                logger.warning('Skipping schedule %r: start hour is not before end hour', match.group(0))
                continue
            days = parse_day_letters(letters)
            slots.append({
                'room': room,
                'days': [day.name for day in iter_days(days)],
                'days_abbrev': letters,
                'start_hour': start,
                'end_hour': end
            })

    return slots


def parse_option_script(script_content):
    """
    Extract ``new Option('label', 'value')`` entries from the faculty/program
    list scripts published next to the timetable.
    """
    return [
        {'value': match.group(2), 'label': match.group(1)}
        for match in OPTION_PATTERN.finditer(script_content or '')
    ]
