import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '8080'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Comma separated; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Party limits
    PARTY_MAX_MEMBERS = int(os.environ.get('PARTY_MAX_MEMBERS', '8'))
    PARTY_CODE_LENGTH = int(os.environ.get('PARTY_CODE_LENGTH', '4'))
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '20'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '120'))
    # Liveness sweep interval (sec). 0 disables.
    HEARTBEAT_INTERVAL_SEC = int(os.environ.get('HEARTBEAT_INTERVAL_SEC', '30'))
