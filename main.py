"""
Main entry point for the Vision Assist application
"""
import os
import logging
import argparse
import threading
import time
import cv2
import numpy as np
from flask import Flask, Response, render_template, request, jsonify, redirect, url_for
from flask_socketio import SocketIO
from flask_cors import CORS

from vision_assist import config
from vision_assist.core.assistant import VisionAssistant
from vision_assist.core.auth import AuthService, AuthenticationError
from vision_assist.core.detection_log import DetectionLogger
from vision_assist.utils.speech import SpeechManager
from vision_assist.utils.supabase_client import get_supabase_client, ConfigurationError

logger = logging.getLogger("VisionAssist")

# Global assistant and auth instances
assistant = None
auth_service = None
_instance_lock = threading.Lock()

# Camera index to open, set from the command line
CAMERA_INDEX = config.CAMERA_INDEX

# Initialize Flask app
app = Flask(__name__,
            template_folder=os.path.join('frontend', 'templates'),
            static_folder=os.path.join('frontend', 'static'))
# Enable CORS for all routes and origins
CORS(app)
socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')


def get_auth_service():
    """Get or create the auth service"""
    global auth_service
    if auth_service is None:
        try:
            auth_service = AuthService(get_supabase_client())
        except ConfigurationError as e:
            raise AuthenticationError(str(e)) from e
    return auth_service


def current_user():
    """The signed-in user, or None when signed out or accounts are unavailable"""
    try:
        return get_auth_service().current_user
    except AuthenticationError:
        return None


def get_assistant_instance():
    """Get or create the assistant for the signed-in session"""
    global assistant
    with _instance_lock:
        if assistant is None:
            detection_logger = None
            if auth_service is not None:
                detection_logger = DetectionLogger(auth_service.client)

            # Forward speech before the camera opens so its errors reach the page
            speech_manager = SpeechManager(enabled=config.SERVER_SPEECH)
            setup_announcement_forwarder(speech_manager)

            logger.info(f"Initializing Vision Assist with camera index {CAMERA_INDEX}")
            assistant = VisionAssistant(camera_index=CAMERA_INDEX,
                                        speech_manager=speech_manager,
                                        detection_logger=detection_logger)
        return assistant


def teardown_assistant():
    """Stop detection: clear warning timers, cancel speech and release the camera"""
    global assistant
    with _instance_lock:
        if assistant is not None:
            assistant.shutdown()
            assistant = None


def setup_announcement_forwarder(speech_manager):
    """Forward everything the assistant says to the browser via WebSocket"""

    def forward(text, priority):
        socketio.emit('announcement', {
            'text': text,
            'priority': priority,
            'rate': speech_manager.rate,
            'pitch': speech_manager.pitch,
            # The page speaks only when the device cannot
            'speak': not speech_manager.tts_working,
        })

    original_speak = speech_manager.speak
    original_announce = speech_manager.announce

    def speak_with_websocket(text):
        result = original_speak(text)
        if result:
            forward(result, False)
        return result

    def announce_with_websocket(text):
        result = original_announce(text)
        if result:
            forward(result, True)
        return result

    # Replace the original methods with the forwarding versions
    speech_manager.speak = speak_with_websocket
    speech_manager.announce = announce_with_websocket


def error_frame(message):
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    cv2.putText(frame, message, (80, 240), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)
    return frame


def encode_frame(frame):
    ret, buffer = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, config.JPEG_QUALITY])
    if not ret:
        raise ValueError("Failed to encode frame as JPEG")
    return (b'--frame\r\n'
            b'Content-Type: image/jpeg\r\n\r\n' + buffer.tobytes() + b'\r\n')


def generate_frames():
    """Per-frame loop: detect, warn, log and stream the annotated frame"""
    instance = get_assistant_instance()
    last_warning_keys = None
    last_frame_time = 0.0

    # Ends when the session is torn down (logout)
    while instance is assistant:
        # Frame rate limiting
        elapsed = time.time() - last_frame_time
        sleep_time = max(0, 1.0 / config.FPS - elapsed)
        if sleep_time > 0:
            time.sleep(sleep_time)
        last_frame_time = time.time()

        frame = None
        processed_frame = None
        try:
            ret, frame = instance.read_frame()
            if not ret or frame is None:
                processed_frame = error_frame("Camera Error")
            else:
                user = current_user()
                processed_frame, warnings = instance.process_frame(
                    frame, user['id'] if user else None)

                warning_keys = sorted(warnings)
                if warning_keys != last_warning_keys:
                    last_warning_keys = warning_keys
                    socketio.emit('warnings', {'warnings': instance.active_warnings()})
        except Exception:
            logger.exception("Error during object detection")
            if processed_frame is None:
                processed_frame = frame if frame is not None else error_frame("Processing Error")

        try:
            yield encode_frame(processed_frame)
        except Exception:
            logger.exception("Error encoding frame")


@app.route('/')
def index():
    """Render the detection page"""
    if current_user() is None:
        return redirect(url_for('login'))
    return render_template('index.html', user=current_user())


@app.route('/login', methods=['GET', 'POST'])
def login():
    """Sign in, sign up and password reset forms"""
    if current_user() is not None:
        return redirect(url_for('index'))

    mode = request.values.get('mode', 'signin')
    if mode not in ('signin', 'signup', 'reset'):
        mode = 'signin'
    error = None
    success = None
    email = request.form.get('email', '')

    if request.method == 'POST':
        password = request.form.get('password', '')
        try:
            service = get_auth_service()
            if mode == 'signup':
                success = service.sign_up(email, password, request.form.get('confirm_password', ''))
                mode = 'signin'
            elif mode == 'reset':
                success = service.reset_password(email)
                mode = 'signin'
            else:
                service.sign_in(email, password)
                return redirect(url_for('index'))
        except AuthenticationError as e:
            error = e.message

    return render_template('login.html', mode=mode, error=error, success=success, email=email)


@app.route('/logout', methods=['GET', 'POST'])
def logout():
    """Sign out and stop the detection session"""
    teardown_assistant()
    try:
        get_auth_service().sign_out()
    except AuthenticationError as e:
        logger.debug(f"Sign out skipped: {e.message}")
    except Exception:
        logger.exception("Error signing out")
    return redirect(url_for('login'))


@app.route('/video_feed')
def video_feed():
    """Video streaming route"""
    if current_user() is None:
        return jsonify({'error': 'Not signed in'}), 401
    return Response(generate_frames(),
                    mimetype='multipart/x-mixed-replace; boundary=frame')


@app.route('/api/status', methods=['GET'])
def status():
    """Model, camera and voice state"""
    if current_user() is None:
        return jsonify({'error': 'Not signed in'}), 401
    return jsonify(get_assistant_instance().status())


@app.route('/api/warnings', methods=['GET'])
def warnings():
    """Currently active warnings"""
    if current_user() is None:
        return jsonify({'error': 'Not signed in'}), 401
    return jsonify({'warnings': get_assistant_instance().active_warnings()})


@app.route('/api/toggle_voice', methods=['POST'])
def toggle_voice():
    """Turn voice warnings on or off"""
    if current_user() is None:
        return jsonify({'error': 'Not signed in'}), 401
    muted = get_assistant_instance().toggle_voice()
    return jsonify({'muted': muted})


@app.route('/api/camera_status', methods=['GET'])
def camera_status():
    """Check camera status"""
    if current_user() is None:
        return jsonify({'error': 'Not signed in'}), 401
    result = get_assistant_instance().camera_status()
    result['settings'] = {
        'camera_index': CAMERA_INDEX,
        'requested_width': config.CAMERA_WIDTH,
        'requested_height': config.CAMERA_HEIGHT,
        'jpeg_quality': config.JPEG_QUALITY,
    }
    return jsonify(result)


# WebSocket event handlers
@socketio.on('connect')
def handle_connect():
    """Handle WebSocket connection"""
    logger.info('Client connected')


@socketio.on('disconnect')
def handle_disconnect():
    """Handle WebSocket disconnection"""
    logger.info('Client disconnected')


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Vision Assist')
    parser.add_argument('--host', type=str, default='0.0.0.0', help='Host to run the server on')
    parser.add_argument('--port', type=int, default=5000, help='Port to run the server on')
    parser.add_argument('--debug', action='store_true', help='Run in debug mode')
    parser.add_argument('--camera-index', dest='camera_index', type=int, default=config.CAMERA_INDEX,
                        help='Camera index to use (default: 0)')
    parser.add_argument('--camera-width', type=int, default=config.CAMERA_WIDTH,
                        help='Ideal camera width (default: 1920)')
    parser.add_argument('--camera-height', type=int, default=config.CAMERA_HEIGHT,
                        help='Ideal camera height (default: 1080)')
    parser.add_argument('--jpeg-quality', type=int, default=config.JPEG_QUALITY,
                        help='JPEG quality for streaming (50-100, default: 85)')
    parser.add_argument('--fps', type=int, default=config.FPS,
                        help='Target frame rate of the video stream (default: 25)')
    parser.add_argument('--no-server-speech', dest='server_speech', action='store_false',
                        help='Speak in the browser instead of on this device')
    parser.set_defaults(server_speech=config.SERVER_SPEECH)

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    CAMERA_INDEX = args.camera_index
    config.CAMERA_WIDTH = args.camera_width
    config.CAMERA_HEIGHT = args.camera_height
    config.JPEG_QUALITY = max(50, min(100, args.jpeg_quality))  # Limit between 50-100
    config.SERVER_SPEECH = args.server_speech
    config.FPS = max(1, args.fps)

    print(f"Visit http://{args.host}:{args.port}/ in your browser to access Vision Assist")

    # Run Flask app with SocketIO
    socketio.run(app, host=args.host, port=args.port, debug=args.debug, allow_unsafe_werkzeug=True)
