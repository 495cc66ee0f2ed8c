from flask import Blueprint, jsonify, request
from models import db, Program, Subject

catalog_bp = Blueprint('catalog', __name__)


@catalog_bp.route('/')
def list_programs():
    """List stored programs, newest import first."""
    programs = Program.query.order_by(Program.created_at.desc(), Program.id.desc()).all()
    return jsonify({
        'programs': [program.summary() for program in programs]
    })


@catalog_bp.route('/<int:program_id>')
def get_program(program_id):
    """Get a program with its full catalog."""
    program = db.get_or_404(Program, program_id)
    return jsonify(program.to_dict())


@catalog_bp.route('/<int:program_id>/subjects/search')
def search_subjects(program_id):
    """Search a program's subjects by code or name."""
    program = db.get_or_404(Program, program_id)
    query = request.args.get('q', '').strip()

    if not query:
        return jsonify({'subjects': []})

    subjects = Subject.query.filter(
        Subject.program_id == program.id,
        db.or_(
            Subject.code.ilike(f'%{query}%'),
            Subject.name.ilike(f'%{query}%')
        )
    ).order_by(Subject.code).limit(20).all()

    return jsonify({
        'subjects': [subject.to_dict() for subject in subjects]
    })


@catalog_bp.route('/<int:program_id>/subjects/<code>')
def get_subject(program_id, code):
    """Get one subject with its groups."""
    program = db.get_or_404(Program, program_id)
    subject = program.get_subject(code)
    if not subject:
        return jsonify({'error': f'Subject {code} not found'}), 404
    return jsonify(subject.to_dict())


@catalog_bp.route('/<int:program_id>', methods=['DELETE'])
def delete_program(program_id):
    """Delete a stored program and its catalog."""
    program = db.get_or_404(Program, program_id)
    db.session.delete(program)
    db.session.commit()
    return jsonify({'success': True})
