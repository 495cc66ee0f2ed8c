from flask import Blueprint, jsonify, request, current_app
from models import db, Program, Subject
from utils.conflicts import find_clashes
from utils.timetable_generator import (
    GenerationPreferences,
    GroupChoice,
    ScheduleInputError,
    TimetableGenerator,
)

schedules_bp = Blueprint('schedules', __name__)


def load_catalog(data):
    """
    Resolve the catalog a request refers to.

    Either ``program_id`` of a stored program, or an inline ``subjects`` list
    (built as unsaved model instances). Raises ScheduleInputError for bad
    shapes and returns None when the program does not exist.
    """
    if data.get('subjects') is not None:
        subjects = data['subjects']
        if not isinstance(subjects, list):
            raise ScheduleInputError('subjects must be a list')
        try:
            catalog = [Subject.from_dict(s) for s in subjects]
        except (AttributeError, TypeError, ValueError) as e:
            raise ScheduleInputError(f'Invalid subject data: {e}')

        for subject in catalog:
            for group in subject.groups:
                invalid = group.invalid_slots()
                if invalid:
                    slot = invalid[0]
                    raise ScheduleInputError(
                        f'Invalid time slot {slot.days_abbrev or "(no days)"} '
                        f'{slot.start_hour}-{slot.end_hour} in group {group.number} of subject {subject.code}'
                    )
            if not subject.is_valid():
                raise ScheduleInputError(f'Invalid subject data for {subject.code}')
        return catalog

    program_id = data.get('program_id')
    if program_id is None:
        raise ScheduleInputError('program_id or subjects is required')
    if isinstance(program_id, bool) or not isinstance(program_id, int):
        raise ScheduleInputError('program_id must be an integer')

    program = db.session.get(Program, program_id)
    if program is None:
        return None
    return program.subjects


def _resolve_choice(subjects, entry):
    """Turn a {subject_code, group_number} entry into a GroupChoice, or None if unknown."""
    if not isinstance(entry, dict):
        raise ScheduleInputError('selection entries must be objects')
    code = str(entry.get('subject_code', '')).strip()
    number = str(entry.get('group_number', '')).strip()
    if not code or not number:
        raise ScheduleInputError('subject_code and group_number are required')

    for subject in subjects:
        if subject.code == code:
            group = subject.get_group(number)
            if group is not None:
                return GroupChoice.from_group(subject, group)
    return None


@schedules_bp.route('/generate', methods=['POST'])
def generate_schedules():
    """Generate the best clash-free timetables for the selected subjects."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON body is required'}), 400

    try:
        subjects = load_catalog(data)
        if subjects is None:
            return jsonify({'error': 'Program not found'}), 404

        selected_codes = data.get('selected_codes', [])
        if not isinstance(selected_codes, list):
            raise ScheduleInputError('selected_codes must be a list')

        defaults = GenerationPreferences.from_config(current_app.config)
        preferences = GenerationPreferences.from_dict(data.get('options'), defaults=defaults)

        generator = TimetableGenerator(subjects, selected_codes, preferences)
    except ScheduleInputError as e:
        return jsonify({'error': str(e)}), 400

    result = generator.run()
    current_app.logger.info(
        'Generated %d schedules for %s (found %d, partial=%s)',
        len(result.schedules), ','.join(str(c) for c in selected_codes),
        result.combinations_found, result.partial
    )
    return jsonify(result.to_dict())


@schedules_bp.route('/check-clash', methods=['POST'])
def check_clash():
    """Check if a group would clash with a manually built timetable."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON body is required'}), 400

    try:
        subjects = load_catalog(data)
        if subjects is None:
            return jsonify({'error': 'Program not found'}), 404

        selection = data.get('selection', [])
        if not isinstance(selection, list):
            raise ScheduleInputError('selection must be a list')

        candidate = _resolve_choice(subjects, data.get('candidate'))
        if candidate is None:
            return jsonify({'error': 'Candidate group not found'}), 404

        chosen = []
        for entry in selection:
            choice = _resolve_choice(subjects, entry)
            if choice is None:
                return jsonify({
                    'error': f"Group {entry.get('group_number')} of {entry.get('subject_code')} not found"
                }), 404
            chosen.append(choice)
    except ScheduleInputError as e:
        return jsonify({'error': str(e)}), 400

    clashes = find_clashes(candidate, chosen)
    return jsonify({
        'has_clash': len(clashes) > 0,
        'clashing': clashes
    })
