"""
API Routes
==========
Flask blueprints for all API endpoints.
"""
import json
import time
from flask import Blueprint, request, jsonify, Response

from nyay_sahayak import __version__
from nyay_sahayak.api.middleware import rate_limit, require_session
from nyay_sahayak.models.schemas import (
    ChatRequest,
    TranslateRequest,
    QuestionRequest,
    CredentialsRequest,
    LessonProgressRequest,
    QuizSubmission,
    HealthStatus
)
from nyay_sahayak.services.aggregator import GenerationHandle
from nyay_sahayak.services.auth import AuthError
from nyay_sahayak.services.bhashini_client import BhashiniError
from nyay_sahayak.services.chat import ConversationBusyError, VoiceInputError
from nyay_sahayak.services.documents import DocumentError
from nyay_sahayak.services.gemini_client import GeminiError
from nyay_sahayak.services.learning import get_learning_catalog
from nyay_sahayak.services.session import get_session_registry, display_languages
from nyay_sahayak.utils.logging import get_logger
from nyay_sahayak.utils.validators import read_upload


SSE_HEADERS = {
    'Cache-Control': 'no-cache',
    'Connection': 'keep-alive',
    'X-Accel-Buffering': 'no'
}


def _sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def _reply_response(handle: GenerationHandle, prelude: dict = None):
    """
    Send a generation to the client.

    Streams snapshots as Server-Sent Events, or with ?stream=false waits for
    the terminal snapshot and returns it as JSON.
    """
    if request.args.get('stream', 'true').lower() in ('false', '0', 'no'):
        with handle:
            last = handle.wait()
        result = dict(prelude or {})
        result.update(last.to_dict() if last else {'id': handle.reply_id, 'text': '', 'is_loading': False})
        return jsonify(result)

    def generate():
        try:
            if prelude:
                yield _sse_event(prelude)
            for snapshot in handle:
                yield _sse_event(snapshot.to_dict())
        finally:
            handle.close()

    return Response(generate(), mimetype='text/event-stream', headers=SSE_HEADERS)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _gemini_error_response(error: GeminiError):
    return jsonify({'error': error.user_message or 'The AI service is unavailable. Please try again.'}), 502


def create_sessions_blueprint() -> Blueprint:
    """Create session, language and translation routes blueprint."""
    bp = Blueprint('sessions', __name__, url_prefix='/api')
    logger = get_logger().api_logger

    @bp.route('/sessions', methods=['POST'])
    def create_session():
        """Start a session for a client."""
        data = _json_body()
        client_id = data.get('client_id') or request.headers.get('X-Client-Id')
        session = get_session_registry().create(client_id=client_id)
        return jsonify(session.to_dict()), 201

    @bp.route('/sessions/<session_id>', methods=['GET'])
    @require_session
    def get_session(session):
        return jsonify(session.to_dict())

    @bp.route('/sessions/<session_id>', methods=['DELETE'])
    def end_session(session_id: str):
        """End a session and discard its state."""
        if not get_session_registry().end(session_id):
            return jsonify({'error': 'Session not found'}), 404
        return jsonify({'message': 'Session ended'})

    @bp.route('/sessions/<session_id>/language', methods=['GET'])
    @require_session
    def get_language(session):
        return jsonify({'language': session.display_language})

    @bp.route('/sessions/<session_id>/language', methods=['PUT'])
    @require_session
    def set_language(session):
        """Switch the display language."""
        code = _json_body().get('language', '')
        try:
            session.set_display_language(code)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        return jsonify({'language': session.display_language})

    @bp.route('/languages', methods=['GET'])
    def list_languages():
        """List display languages, English first."""
        session_id = request.args.get('session')
        session = get_session_registry().get(session_id) if session_id else None
        if session is not None:
            languages = session.available_languages()
        else:
            languages = display_languages(get_session_registry().bhashini)
        return jsonify({'languages': [lang.to_dict() for lang in languages]})

    @bp.route('/sessions/<session_id>/translate', methods=['POST'])
    @rate_limit
    @require_session
    def translate(session):
        """Translate text into the display language (or the given target)."""
        req = TranslateRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        translated = session.translate(req.text, req.target_language, req.source_language)
        logger.debug(f"Translate request for session {session.session_id}")
        return jsonify({
            'text': req.text,
            'translated_text': translated,
            'target_language': req.target_language or session.display_language,
        })

    return bp


def create_chat_blueprint() -> Blueprint:
    """Create chat, voice and speech routes blueprint."""
    bp = Blueprint('chat', __name__, url_prefix='/api')
    logger = get_logger().api_logger

    @bp.route('/sessions/<session_id>/chat', methods=['GET'])
    @require_session
    def get_chat(session):
        return jsonify(session.chat.to_dict())

    @bp.route('/sessions/<session_id>/chat', methods=['POST'])
    @rate_limit
    @require_session
    def send_message(session):
        """Send a message and stream the reply."""
        req = ChatRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        try:
            handle = session.chat.send_message(req.message, req.language)
        except ConversationBusyError as e:
            return jsonify({'error': str(e)}), 409
        return _reply_response(handle)

    @bp.route('/sessions/<session_id>/chat', methods=['DELETE'])
    @require_session
    def clear_chat(session):
        try:
            session.chat.clear()
        except ConversationBusyError as e:
            return jsonify({'error': str(e)}), 409
        return jsonify(session.chat.to_dict())

    @bp.route('/sessions/<session_id>/chat/voice', methods=['POST'])
    @rate_limit
    @require_session
    def send_voice_message(session):
        """Transcribe a recording, send it, and stream the reply."""
        if 'audio' not in request.files:
            return jsonify({'error': 'No audio recorded'}), 400
        upload = request.files['audio']
        language = request.form.get('language')

        try:
            with session.chat.voice.recording(upload) as audio:
                transcript, handle = session.chat.send_voice_message(audio, upload.mimetype, language)
        except ConversationBusyError as e:
            return jsonify({'error': str(e)}), 409
        except VoiceInputError as e:
            return jsonify({'error': str(e)}), 400
        except GeminiError as e:
            logger.error(f"Voice message failed: {e}")
            return _gemini_error_response(e)

        return _reply_response(handle, prelude={'transcript': transcript})

    @bp.route('/sessions/<session_id>/transcribe', methods=['POST'])
    @rate_limit
    @require_session
    def transcribe(session):
        """Transcribe a recording without sending it."""
        if 'audio' not in request.files:
            return jsonify({'error': 'No audio recorded'}), 400
        upload = request.files['audio']
        language = request.form.get('language') or session.display_language

        try:
            with session.chat.voice.recording(upload) as audio:
                text = session.chat.voice.transcribe(audio, upload.mimetype, language)
        except VoiceInputError as e:
            return jsonify({'error': str(e)}), 400
        except GeminiError as e:
            logger.error(f"Transcription failed: {e}")
            return _gemini_error_response(e)

        return jsonify({'text': text, 'language': language})

    @bp.route('/tts', methods=['POST'])
    @rate_limit
    def text_to_speech():
        """Synthesize speech for a message."""
        data = _json_body()
        text = data.get('text') or ''
        if not text.strip():
            return jsonify({'error': 'text is required'}), 400

        try:
            audio = get_session_registry().bhashini.text_to_speech(text, data.get('language'))
        except BhashiniError as e:
            logger.error(f"Text-to-speech failed: {e}")
            return jsonify({'error': str(e)}), 502

        if not audio:
            return jsonify({'error': 'Could not generate audio for this message.'}), 502
        return jsonify({'audio_content': audio})

    return bp


def create_documents_blueprint() -> Blueprint:
    """Create document analysis routes blueprint."""
    bp = Blueprint('documents', __name__, url_prefix='/api')

    @bp.route('/sessions/<session_id>/document', methods=['GET'])
    @require_session
    def get_document(session):
        return jsonify(session.documents.to_dict())

    @bp.route('/sessions/<session_id>/document', methods=['POST'])
    @require_session
    def upload_document(session):
        """Upload a document image."""
        if 'file' not in request.files:
            return jsonify({'error': 'No file provided'}), 400

        filename, mime_type, data = read_upload(request.files['file'])
        try:
            document = session.documents.load(filename, mime_type, data)
        except DocumentError as e:
            return jsonify({'error': str(e)}), 400
        return jsonify({'document': document.to_dict()}), 201

    @bp.route('/sessions/<session_id>/document', methods=['DELETE'])
    @require_session
    def clear_document(session):
        session.documents.clear()
        return jsonify({'message': 'Document cleared'})

    @bp.route('/sessions/<session_id>/document/summary', methods=['POST'])
    @rate_limit
    @require_session
    def summarize_document(session):
        """Stream a summary of the uploaded document."""
        try:
            handle = session.documents.summarize()
        except DocumentError as e:
            return jsonify({'error': str(e)}), 400
        except ConversationBusyError as e:
            return jsonify({'error': str(e)}), 409
        return _reply_response(handle)

    @bp.route('/sessions/<session_id>/document/questions', methods=['POST'])
    @rate_limit
    @require_session
    def ask_question(session):
        """Stream the answer to a question about the document."""
        req = QuestionRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        try:
            handle = session.documents.ask(req.question)
        except DocumentError as e:
            return jsonify({'error': str(e)}), 400
        except ConversationBusyError as e:
            return jsonify({'error': str(e)}), 409
        return _reply_response(handle)

    return bp


def create_account_blueprint() -> Blueprint:
    """Create authentication and progress routes blueprint."""
    bp = Blueprint('account', __name__, url_prefix='/api')

    def _signed_in_user(session):
        return session.auth.current_user()

    @bp.route('/sessions/<session_id>/auth/login', methods=['POST'])
    @require_session
    def login(session):
        req = CredentialsRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400
        try:
            user = session.auth.login(req.email, req.password)
        except AuthError as e:
            return jsonify({'error': str(e)}), 400
        return jsonify({'user': user.to_dict()})

    @bp.route('/sessions/<session_id>/auth/signup', methods=['POST'])
    @require_session
    def signup(session):
        req = CredentialsRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400
        try:
            user = session.auth.signup(req.name, req.email, req.password, req.confirm_password)
        except AuthError as e:
            return jsonify({'error': str(e)}), 400
        return jsonify({'user': user.to_dict()}), 201

    @bp.route('/sessions/<session_id>/auth/google', methods=['POST'])
    @require_session
    def login_with_google(session):
        user = session.auth.login_with_google()
        return jsonify({'user': user.to_dict()})

    @bp.route('/sessions/<session_id>/auth/logout', methods=['POST'])
    @require_session
    def logout(session):
        session.auth.logout()
        return jsonify({'message': 'Logged out'})

    @bp.route('/sessions/<session_id>/auth/user', methods=['GET'])
    @require_session
    def current_user(session):
        user = _signed_in_user(session)
        return jsonify({'user': user.to_dict() if user else None})

    @bp.route('/sessions/<session_id>/progress', methods=['GET'])
    @require_session
    def get_progress(session):
        """Progress overview for the signed-in user."""
        user = _signed_in_user(session)
        if user is None:
            return jsonify({'error': 'Not signed in'}), 401

        catalog = get_learning_catalog()
        summary = session.progress.summarize(user.id, catalog.list_modules())
        summary['progress'] = session.progress.get_progress(user.id).to_dict()
        return jsonify(summary)

    @bp.route('/sessions/<session_id>/progress/lessons', methods=['POST'])
    @require_session
    def mark_lesson(session):
        """Mark a lesson read or unread."""
        user = _signed_in_user(session)
        if user is None:
            return jsonify({'error': 'Not signed in'}), 401

        req = LessonProgressRequest.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        module = get_learning_catalog().get_module(req.module_id)
        if module is None or req.lesson_id not in module.lesson_ids():
            return jsonify({'error': 'Lesson not found'}), 404

        if req.read:
            progress = session.progress.mark_lesson_read(user.id, req.module_id, req.lesson_id)
        else:
            progress = session.progress.mark_lesson_unread(user.id, req.module_id, req.lesson_id)
        return jsonify({'progress': progress.to_dict()})

    @bp.route('/sessions/<session_id>/progress/quizzes', methods=['POST'])
    @require_session
    def submit_quiz(session):
        """Grade a quiz attempt and record the score."""
        user = _signed_in_user(session)
        if user is None:
            return jsonify({'error': 'Not signed in'}), 401

        req = QuizSubmission.from_json(_json_body())
        errors = req.validate()
        if errors:
            return jsonify({'error': '; '.join(errors)}), 400

        try:
            result = get_learning_catalog().grade_quiz(req.module_id, req.answers)
        except KeyError:
            return jsonify({'error': 'Module not found'}), 404

        progress = session.progress.save_quiz_result(user.id, req.module_id, result.score, result.total)
        return jsonify({'result': result.to_dict(), 'progress': progress.to_dict()})

    return bp


def create_learning_blueprint() -> Blueprint:
    """Create learning module routes blueprint."""
    bp = Blueprint('learning', __name__, url_prefix='/api')

    def _localizing_session():
        session_id = request.args.get('session')
        return get_session_registry().get(session_id) if session_id else None

    @bp.route('/modules', methods=['GET'])
    def list_modules():
        """List learning modules, localized when a session is given."""
        catalog = get_learning_catalog()
        session = _localizing_session()
        modules = catalog.list_modules()
        if session is not None:
            modules = [catalog.localize_module(module, session.dispatcher) for module in modules]
        return jsonify({'modules': [module.to_dict(include_content=False) for module in modules]})

    @bp.route('/modules/<module_id>', methods=['GET'])
    def get_module(module_id: str):
        """Get a module with its lessons and quiz (answers withheld)."""
        catalog = get_learning_catalog()
        module = catalog.get_module(module_id)
        if module is None:
            return jsonify({'error': 'Module not found'}), 404

        session = _localizing_session()
        if session is not None:
            module = catalog.localize_module(module, session.dispatcher)
        return jsonify(module.to_dict())

    return bp


def create_health_blueprint() -> Blueprint:
    """Create health check routes blueprint."""
    bp = Blueprint('health', __name__, url_prefix='/api')

    @bp.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        registry = get_session_registry()
        gemini_configured = registry.gemini.is_configured
        bhashini_connected = registry.bhashini.is_healthy()

        status = HealthStatus(
            status='healthy' if gemini_configured and bhashini_connected else 'degraded',
            gemini_configured=gemini_configured,
            bhashini_connected=bhashini_connected,
            version=__version__
        )
        return jsonify(status.to_dict())

    @bp.route('/metrics', methods=['GET'])
    def get_metrics():
        """Get application metrics."""
        import psutil

        system_metrics = {
            'cpu_percent': psutil.cpu_percent(interval=0.1),
            'memory_percent': psutil.virtual_memory().percent,
            'disk_usage': psutil.disk_usage('/').percent,
            'uptime': time.time() - psutil.boot_time()
        }

        return jsonify({
            'session_metrics': get_session_registry().get_stats(),
            'system_metrics': system_metrics
        })

    @bp.route('/cache/stats', methods=['GET'])
    def cache_stats():
        """Translation cache statistics, for one session or all of them."""
        registry = get_session_registry()
        session_id = request.args.get('session')
        if session_id:
            session = registry.get(session_id)
            if session is None:
                return jsonify({'error': 'Session not found'}), 404
            return jsonify(session.dispatcher.get_stats())
        return jsonify(registry.get_stats())

    return bp


def create_logs_blueprint() -> Blueprint:
    """Create logs routes blueprint for the frontend console panel."""
    from nyay_sahayak.utils.logging import log_buffer

    bp = Blueprint('logs', __name__)

    @bp.route('/logs', methods=['GET'])
    def get_logs():
        """Get logs from the in-memory buffer."""
        since_id = request.args.get('since', 0, type=int)
        if since_id > 0:
            logs = log_buffer.get_since(since_id)
        else:
            logs = log_buffer.get_all()
        return jsonify({'logs': logs})

    @bp.route('/logs/clear', methods=['POST'])
    def clear_logs():
        """Clear the log buffer."""
        log_buffer.clear()
        return jsonify({'message': 'Logs cleared'})

    return bp
