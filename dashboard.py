import threading
import time
import webbrowser

from flask import Flask, jsonify, request, render_template_string
from flask_cors import CORS

import adb_bridge
import config

app = Flask(__name__)
CORS(app)


def payload(text, data):
    if 'error' in data:
        result = {'status': 'error', 'message': text}
        result.update(data)
        return jsonify(result), 502
    result = {'status': 'ok', 'text': text}
    result.update(data)
    return jsonify(result)


def find_serial():
    """Serial from the query string or auto-detected. Raises adb_bridge.AdbError."""
    return request.args.get('serial') or adb_bridge.detect_device()


def no_device(message='No Android device detected.'):
    return jsonify({'status': 'error', 'message': message}), 503


# --- API Endpoints ---
@app.route('/')
def dashboard():
    return render_template_string('''
    <!DOCTYPE html>
    <html>
    <head>
        <title>Activity Info</title>
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <style>
            body {
                background: #181c24;
                color: #f4f4f4;
                font-family: 'Inter', Arial, sans-serif;
                margin: 0;
                padding: 0;
            }
            h1 {
                color: #fff;
                font-weight: 700;
                margin: 2rem 0 1rem 0;
                text-align: center;
            }
            .card {
                background: #23283a;
                border-radius: 18px;
                box-shadow: 0 2px 12px #0002;
                padding: 1.5rem;
                margin: 1rem auto;
                max-width: 900px;
            }
            pre {
                white-space: pre-wrap;
                word-wrap: break-word;
                margin: 0;
            }
            pre b { color: #8ecfff; }
            .actions {
                display: flex;
                justify-content: center;
                align-items: center;
                gap: 1rem;
                margin: 1rem 0;
            }
            button, select, input {
                background: #23283a;
                color: #8ecfff;
                border: 2px solid #8ecfff;
                border-radius: 8px;
                padding: 0.5em 1em;
                font-size: 1rem;
                font-family: inherit;
            }
            button { cursor: pointer; transition: background 0.2s, color 0.2s; }
            button:hover { background: #8ecfff; color: #23283a; }
        </style>
    </head>
    <body>
        <h1>Activity Info</h1>
        <div class="actions">
            <select id="mode" onchange="refreshInfo()">
                <option value="activity">Activities</option>
                <option value="process">Process</option>
            </select>
            <input id="procName" value="{{ default_name }}" size="18">
            <button onclick="refreshInfo()">Refresh</button>
            <button onclick="copyInfo()">Copy</button>
            <label>Font Size:</label>
            <select id="fontSize" onchange="setFontSize(this.value)">
                <option>12</option><option>14</option><option>16</option><option>18</option><option>20</option>
            </select>
        </div>
        <div class="card"><pre id="info">Loading...</pre></div>
        <script>
        const FONT_SIZE_KEY = 'findactivity.fontsize';
        let lastText = '';
        function escapeHtml(s) {
            return s.replace(/&/g, '&amp;').replace(/</g, '&lt;').replace(/>/g, '&gt;');
        }
        function showText(text) {
            lastText = text;
            // Task and PID headers are bold
            document.getElementById('info').innerHTML = text.split('\\n').map(line => {
                let html = escapeHtml(line);
                return /^(Task:|PID:)/.test(line) ? '<b>' + html + '</b>' : html;
            }).join('\\n');
        }
        function refreshInfo() {
            let mode = document.getElementById('mode').value;
            let url = '/api/activity';
            if (mode === 'process') {
                url = '/api/process?name=' + encodeURIComponent(document.getElementById('procName').value);
            }
            fetch(url).then(r => r.json()).then(data => {
                showText(data.status === 'ok' ? data.text : data.message);
            });
        }
        function copyInfo() {
            navigator.clipboard.writeText(lastText);
        }
        function setFontSize(size) {
            document.getElementById('info').style.fontSize = size + 'px';
            localStorage.setItem(FONT_SIZE_KEY, size);
        }
        let saved = localStorage.getItem(FONT_SIZE_KEY) || '14';
        document.getElementById('fontSize').value = saved;
        setFontSize(saved);
        refreshInfo();
        </script>
    </body>
    </html>
    ''', default_name=config.DEFAULT_PROCESS_NAME)


@app.route('/api/activity')
def api_activity():
    try:
        serial = find_serial()
    except adb_bridge.AdbError as e:
        return no_device(str(e))
    if not serial:
        return no_device()
    _, text, data = adb_bridge.collect_activity(serial)
    return payload(text, data)


@app.route('/api/process')
def api_process():
    name = request.args.get('name', '').strip()
    if not name:
        return jsonify({'status': 'error', 'message': 'No process name provided'}), 400
    try:
        serial = find_serial()
    except adb_bridge.AdbError as e:
        return no_device(str(e))
    if not serial:
        return no_device()
    _, text, data = adb_bridge.collect_process(name, serial)
    return payload(text, data)


if __name__ == '__main__':
    print("[INFO] Starting FindActivity dashboard...")

    def _open_browser(port):
        time.sleep(1)
        url = f'http://localhost:{port}'
        print(f"[INFO] Attempting to open browser at {url}")
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            print(f"[WARN] Could not open browser automatically: {e}")

    port = config.DASHBOARD_PORT
    try:
        threading.Thread(target=_open_browser, args=(port,), daemon=True).start()
        app.run(port=port)
    except OSError as e:
        print(f"[WARN] Port {port} in use or unavailable: {e}")
        port = config.DASHBOARD_FALLBACK_PORT
        print(f"[INFO] Trying fallback port {port}...")
        threading.Thread(target=_open_browser, args=(port,), daemon=True).start()
        app.run(port=port)
