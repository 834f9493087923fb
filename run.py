#!/usr/bin/env python3
"""Run the Staxxit game server."""

import os

from staxxit.app import create_app

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    print("="*60)
    print("Staxxit Server")
    print("="*60)
    print(f"Server running on: http://localhost:{port}")
    print(f"On a local network use: http://<your-IP>:{port}")
    print("Press Ctrl+C to stop")
    print("="*60)

    app.run(host="0.0.0.0", port=port, debug=True)
