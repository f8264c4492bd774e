#!/usr/bin/env python3
"""
Nyay Sahayak - Server Launcher
==============================
Launch the Nyay Sahayak API and open it in the browser.

Usage:
    python run.py
    python run.py --no-browser
"""
import sys
import os
import threading
import time
import webbrowser
from pathlib import Path

# Add package to path if running directly
package_dir = Path(__file__).parent
if str(package_dir) not in sys.path:
    sys.path.insert(0, str(package_dir))

os.environ.setdefault('NYAY_SAHAYAK_APP_DIR', str(package_dir))


# Colors for terminal output
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'


def print_banner(app_url: str):
    """Display startup banner"""
    print(f"\n{Colors.CYAN}{'='*60}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.GREEN}  NYAY SAHAYAK - AI Legal Assistant{Colors.RESET}")
    print(f"{Colors.CYAN}{'='*60}{Colors.RESET}")
    print(f"  Server: {app_url}")
    print(f"  Working Directory: {os.getcwd()}")
    print(f"{Colors.CYAN}{'='*60}{Colors.RESET}\n")


def check_services():
    """Report whether Gemini is configured and Bhashini is reachable"""
    from nyay_sahayak.config import config
    from nyay_sahayak.services.bhashini_client import get_bhashini_client

    print(f"{Colors.YELLOW}Checking services...{Colors.RESET}")
    if config.gemini.is_configured:
        print(f"{Colors.GREEN}   ✓ Gemini API key configured{Colors.RESET}")
    else:
        print(f"{Colors.RED}   ⚠ GEMINI_API_KEY not set, AI replies will fail{Colors.RESET}")

    if get_bhashini_client().is_healthy():
        print(f"{Colors.GREEN}   ✓ Bhashini reachable at {config.bhashini.base_url}{Colors.RESET}")
    else:
        print(f"{Colors.RED}   ⚠ Bhashini not detected at {config.bhashini.base_url}{Colors.RESET}")
        print(f"{Colors.YELLOW}   Only English will be offered as display language{Colors.RESET}")
    print()


def main():
    """Main entry point"""
    from nyay_sahayak.config import config
    from nyay_sahayak.app import create_app

    app_url = f"http://{config.server.host}:{config.server.port}"
    print_banner(app_url)
    check_services()

    if '--no-browser' not in sys.argv:
        def open_browser():
            time.sleep(1.5)
            webbrowser.open(f"{app_url}/api/health")

        threading.Thread(target=open_browser, daemon=True).start()

    print(f"{Colors.RED}   Press Ctrl+C to close{Colors.RESET}\n")

    app = create_app()
    app.run(host=config.server.host, port=config.server.port, debug=False, use_reloader=False, threaded=True)


if __name__ == '__main__':
    main()
