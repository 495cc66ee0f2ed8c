"""Routes for timetable HTML upload and parsing."""

from flask import Blueprint, request, jsonify, current_app
from models import db, Program
from utils.html_parser import parse_timetable_html, parse_option_script

upload_bp = Blueprint('upload', __name__)

ALLOWED_EXTENSIONS = ('.html', '.htm', '.mhtml')
SCRIPT_EXTENSIONS = ('.js', '.txt', '.html', '.htm')


def _read_html(file):
    return file.read().decode('utf-8', errors='replace')


@upload_bp.route('/parse', methods=['POST'])
def parse_html_file():
    """
    Parse uploaded HTML file and extract the program catalog.
    Returns parsed data without saving to database.
    """
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']

    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        return jsonify({'error': 'File must be HTML or MHTML'}), 400

    parsed = parse_timetable_html(_read_html(file))

    if not parsed['subjects']:
        return jsonify({'error': 'Could not find a class timetable in the HTML'}), 400

    return jsonify({
        'success': True,
        'program': parsed,
        'subject_count': len(parsed['subjects'])
    })


@upload_bp.route('/options', methods=['POST'])
def parse_option_list():
    """
    Read the faculty or program list from a saved selector script.
    Returns the (value, label) pairs so a client can pick the page to upload.
    """
    file = request.files.get('file')
    if file is None or file.filename == '':
        return jsonify({'error': 'No file provided'}), 400

    if not file.filename.lower().endswith(SCRIPT_EXTENSIONS):
        return jsonify({'error': 'File must be a script, text or HTML file'}), 400

    options = parse_option_script(_read_html(file))
    if not options:
        return jsonify({'error': 'No options found in the file'}), 400

    return jsonify({'success': True, 'options': options})


@upload_bp.route('/import', methods=['POST'])
def import_html_file():
    """
    Parse uploaded HTML files and save each program to the database.
    Accepts multiple files key 'files[]'.
    """
    files = request.files.getlist('files[]')

    if not files:
        if 'file' in request.files:
            files = [request.files['file']]
        else:
            return jsonify({'error': 'No files provided'}), 400

    results = []
    success_count = 0

    for file in files:
        if file.filename == '':
            continue

        if not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
            results.append({
                'filename': file.filename,
                'status': 'error',
                'message': 'Invalid file type'
            })
            continue

        try:
            result = _process_single_file_import(file)
        except ValueError as e:
            # Commit per file, so one bad page does not undo the others
            db.session.rollback()
            current_app.logger.warning(f'Import of {file.filename} failed: {e}')
            result = {
                'filename': file.filename,
                'status': 'error',
                'message': str(e)
            }

        results.append(result)
        if result['status'] == 'success':
            success_count += 1

    return jsonify({
        'success': True,
        'summary': f'Processed {len(files)} files. {success_count} succeeded.',
        'results': results,
        'success_count': success_count
    })


def _process_single_file_import(file):
    """Store one parsed page, replacing an earlier import of the same program and semester."""
    parsed = parse_timetable_html(_read_html(file))

    if not parsed['subjects']:
        return {'filename': file.filename, 'status': 'error', 'message': 'Could not find a class timetable'}

    program = Program.from_dict(parsed)
    if not program.code:
        return {'filename': file.filename, 'status': 'error', 'message': 'Could not parse program info'}

    if not program.is_valid():
        invalid = [s.code for s in program.subjects if not s.is_valid()]
        message = f'Invalid schedule data in subjects {", ".join(invalid)}' if invalid else 'Incomplete program data'
        return {'filename': file.filename, 'status': 'error', 'message': message}

    existing = Program.query.filter_by(code=program.code, semester=program.semester).first()
    replaced = existing is not None
    if existing:
        db.session.delete(existing)
        db.session.flush()

    db.session.add(program)
    db.session.commit()

    return {
        'filename': file.filename,
        'status': 'success',
        'program_id': program.id,
        'program_code': program.code,
        'subjects_added': len(program.subjects),
        'replaced': replaced
    }
