import os

from community import create_app, db, socketio
from community.models import User, Post, Comment, ChatRoom

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {'db': db, 'User': User, 'Post': Post, 'Comment': Comment, 'ChatRoom': ChatRoom}


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 3000))
    socketio.run(app, host='0.0.0.0', port=port, debug=app.config['DEBUG'])
