"""
Flask routes для JSON API
"""
import logging

from flask import jsonify, request
from werkzeug.exceptions import BadRequest

from card_splitter.core.config import DEFAULT_GROUP_ID
from card_splitter.core.exceptions import CardSplitterException
from card_splitter.core.models import CardType, pdf_mode_from_dict, pdf_mode_to_dict
from card_splitter.core.workflow_settings import WorkflowSettings, default_settings_filename
from card_splitter.services.import_service import ImportService
from card_splitter.web.utils import (
    get_session, get_settings_service, parse_card_type, read_uploaded_file, require_int
)

logger = logging.getLogger(__name__)

CLIENT_ERRORS = (CardSplitterException, BadRequest, KeyError, ValueError, TypeError)


def _client_error(e):
    message = f"Missing field: {e.args[0]}" if isinstance(e, KeyError) else str(e)
    return jsonify({'error': message}), 400


def _server_error(action, e):
    logger.error(f"Ошибка {action}: {e}")
    return jsonify({'error': str(e)}), 500


def _group_to_dict(session, group):
    data = group.to_dict()
    page_count = len(session.pages)
    data['pageIndices'] = session.groups.group_page_indices(group.id, page_count) \
        if group.id == DEFAULT_GROUP_ID else list(group.page_indices)
    return data


def _validation_to_dict(result):
    return {'isValid': result.is_valid, 'errors': result.errors, 'warnings': result.warnings}


def configure_routes(app):
    """Настройка маршрутов Flask"""

    @app.route('/api/files', methods=['POST'])
    def upload_files():
        """Загрузка PDF и изображений"""
        try:
            uploads = [read_uploaded_file(f) for f in request.files.getlist('files')]
            uploads = [item for item in uploads if item is not None]
            if not uploads:
                return jsonify({'error': 'No files uploaded'}), 400

            decoded = ImportService().decode_batch(uploads)
            session = get_session()
            result = session.import_files(decoded.files, replace_existing=request.args.get('replace') == '1')
            errors = dict(decoded.errors)
            errors.update(result.errors)

            logger.info(f"Загружено файлов: {len(result.files)}, ошибок: {len(errors)}")
            status = 200 if result.files else 400
            return jsonify({
                'files': [source.to_dict() for source in result.files],
                'pages': [page.to_dict() for page in result.pages],
                'errors': errors
            }), status

        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("загрузки файлов", e)

    @app.route('/api/files/<name>', methods=['DELETE'])
    def remove_file(name):
        try:
            session = get_session()
            if not session.page_model.repository.contains(name):
                return jsonify({'error': 'File not found'}), 404
            session.remove_file(name)
            return jsonify({'success': True, 'statistics': session.page_model.statistics()})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("удаления файла", e)

    @app.route('/api/pages')
    def list_pages():
        try:
            session = get_session()
            return jsonify({
                'pages': [record.to_dict() for record in session.page_records()],
                'isReordered': session.page_model.is_reordered(),
                'statistics': session.page_model.statistics()
            })
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("получения страниц", e)

    @app.route('/api/pages/reorder', methods=['POST'])
    def reorder_pages():
        try:
            data = request.get_json(force=True) or {}
            session = get_session()
            session.reorder_pages(require_int(data, 'fromIndex'), require_int(data, 'toIndex'))
            return jsonify({'pages': [page.to_dict() for page in session.pages]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("перестановки страниц", e)

    @app.route('/api/pages/reset-order', methods=['POST'])
    def reset_page_order():
        try:
            session = get_session()
            session.reset_page_order()
            return jsonify({'pages': [page.to_dict() for page in session.pages]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("сброса порядка страниц", e)

    @app.route('/api/groups', methods=['GET', 'POST'])
    def groups():
        try:
            session = get_session()
            if request.method == 'GET':
                return jsonify({'groups': [_group_to_dict(session, g) for g in session.groups.sorted_groups()]})
            data = request.get_json(silent=True) or {}
            mode = pdf_mode_from_dict(data['processingMode']) if data.get('processingMode') else None
            group = session.groups.create_group(
                name=data.get('name'),
                page_indices=data.get('pageIndices') or (),
                processing_mode=mode
            )
            return jsonify(_group_to_dict(session, group)), 201
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("работы с группами", e)

    @app.route('/api/groups/<group_id>', methods=['DELETE'])
    def delete_group(group_id):
        try:
            get_session().groups.delete_group(group_id)
            return jsonify({'success': True})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("удаления группы", e)

    @app.route('/api/groups/<group_id>/move-up', methods=['POST'])
    def move_group_up(group_id):
        try:
            moved = get_session().groups.move_up(group_id)
            return jsonify({'moved': moved})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("перемещения группы", e)

    @app.route('/api/groups/<group_id>/move-down', methods=['POST'])
    def move_group_down(group_id):
        try:
            moved = get_session().groups.move_down(group_id)
            return jsonify({'moved': moved})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("перемещения группы", e)

    @app.route('/api/groups/move-page', methods=['POST'])
    def move_page_between_groups():
        try:
            data = request.get_json(force=True) or {}
            session = get_session()
            moved = session.groups.move_page(
                require_int(data, 'pageIndex'),
                data.get('sourceGroupId', DEFAULT_GROUP_ID),
                data['targetGroupId'],
                len(session.pages)
            )
            return jsonify({'moved': moved})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("перемещения страницы", e)

    @app.route('/api/groups/auto', methods=['POST'])
    def auto_group():
        """Автоматическая группировка по файлам или типам страниц"""
        try:
            data = request.get_json(silent=True) or {}
            session = get_session()
            strategy = data.get('by', 'file')
            if strategy == 'file':
                created = session.groups.auto_group_by_file(session.pages)
            elif strategy == 'pageType':
                created = session.groups.auto_group_by_page_type(session.pages)
            else:
                raise ValueError(f"Unknown grouping: {strategy}")
            return jsonify({'groups': [_group_to_dict(session, group) for group in created]}), 201
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("автоматической группировки", e)

    @app.route('/api/groups/<group_id>/cards')
    def group_cards(group_id):
        """Типы и номера всех карт группы"""
        try:
            session = get_session()
            if session.groups.get_group(group_id) is None:
                return jsonify({'error': 'Group not found'}), 404
            identifier = session.card_identifier(group_id)
            return jsonify({
                'processingMode': pdf_mode_to_dict(identifier.pdf_mode),
                'totalCards': identifier.total_cards(),
                'frontCards': identifier.count_cards(CardType.FRONT),
                'backCards': identifier.count_cards(CardType.BACK),
                'degraded': identifier.degraded,
                'validation': _validation_to_dict(session.validate(group_id)),
                'cards': [entry.to_dict() for entry in identifier.entries()]
            })
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("идентификации карт", e)

    @app.route('/api/cards/skip', methods=['POST'])
    def toggle_card_skip():
        try:
            data = request.get_json(force=True) or {}
            registry = get_session().toggle_skip(
                require_int(data, 'pageIndex'),
                require_int(data, 'gridRow'),
                require_int(data, 'gridColumn'),
                parse_card_type(data.get('cardType')),
                data.get('groupId', DEFAULT_GROUP_ID)
            )
            return jsonify({'skippedCards': [card.to_dict() for card in registry.skipped_cards]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("пропуска карты", e)

    @app.route('/api/cards/skip-row', methods=['POST'])
    def skip_card_row():
        try:
            data = request.get_json(force=True) or {}
            registry = get_session().skip_row(
                require_int(data, 'pageIndex'),
                require_int(data, 'gridRow'),
                data.get('groupId', DEFAULT_GROUP_ID)
            )
            return jsonify({'skippedCards': [card.to_dict() for card in registry.skipped_cards]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("пропуска строки", e)

    @app.route('/api/cards/skip-column', methods=['POST'])
    def skip_card_column():
        try:
            data = request.get_json(force=True) or {}
            registry = get_session().skip_column(
                require_int(data, 'pageIndex'),
                require_int(data, 'gridColumn'),
                data.get('groupId', DEFAULT_GROUP_ID)
            )
            return jsonify({'skippedCards': [card.to_dict() for card in registry.skipped_cards]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("пропуска столбца", e)

    @app.route('/api/cards/clear-skips', methods=['POST'])
    def clear_card_skips():
        try:
            data = request.get_json(silent=True) or {}
            session = get_session()
            group_id = data.get('groupId', DEFAULT_GROUP_ID)
            session.clear_skips(group_id)
            return jsonify({'skippedCards': [card.to_dict() for card in session.registry(group_id).skipped_cards]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("очистки пропусков", e)

    @app.route('/api/cards/override', methods=['POST'])
    def toggle_card_override():
        try:
            data = request.get_json(force=True) or {}
            registry = get_session().toggle_override(
                require_int(data, 'pageIndex'),
                require_int(data, 'gridRow'),
                require_int(data, 'gridColumn'),
                data.get('groupId', DEFAULT_GROUP_ID)
            )
            return jsonify({'cardTypeOverrides': [o.to_dict() for o in registry.overrides]})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("переопределения типа карты", e)

    @app.route('/api/settings', methods=['POST'])
    def update_settings():
        """Изменение глобальных настроек извлечения и вывода"""
        try:
            data = request.get_json(force=True) or {}
            session = get_session()
            if data.get('extraction'):
                session.update_extraction(data['extraction'])
            if data.get('output'):
                session.update_output(data['output'])
            return jsonify({
                'extraction': session.extraction.to_dict(),
                'output': session.output,
                'validation': _validation_to_dict(session.validate())
            })
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("обновления настроек", e)

    @app.route('/api/settings/export')
    def export_settings():
        try:
            session = get_session()
            settings = session.export_settings()
            file_names = [source.name for source in session.page_model.files]
            return jsonify({'fileName': default_settings_filename(file_names), 'settings': settings.to_dict()})
        except Exception as e:
            return _server_error("экспорта настроек", e)

    @app.route('/api/settings/import', methods=['POST'])
    def import_settings():
        try:
            settings = WorkflowSettings.from_dict(request.get_json(silent=True))
            result = get_session().import_settings(settings)
            return jsonify(result.to_dict())
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("импорта настроек", e)

    @app.route('/api/settings/save', methods=['POST'])
    def save_settings():
        """Сохранение настроек в папку настроек сервера"""
        try:
            data = request.get_json(silent=True) or {}
            session = get_session()
            service = get_settings_service()
            file_names = [source.name for source in session.page_model.files]
            path = service.settings_path(file_names, data.get('fileName'))
            service.save(session.export_settings(), path)
            return jsonify({'fileName': path.name})
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("сохранения настроек", e)

    @app.route('/api/settings/load', methods=['POST'])
    def load_settings():
        """Загрузка сохраненных настроек и применение к сессии"""
        try:
            data = request.get_json(force=True) or {}
            service = get_settings_service()
            settings = service.load(service.settings_path([], data['fileName']))
            result = get_session().import_settings(settings)
            return jsonify(result.to_dict())
        except CLIENT_ERRORS as e:
            return _client_error(e)
        except Exception as e:
            return _server_error("загрузки настроек", e)
