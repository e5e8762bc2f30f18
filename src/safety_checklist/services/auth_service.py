import json
import logging
import os
import requests
from pathlib import Path
from appdirs import user_data_dir


class AuthService:
    """Session token for the checklist backend, cached under the user data dir."""

    def __init__(self, api_base_url, data_dir=None, timeout=10):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.token = None
        self.user = None
        self.data_dir = Path(data_dir or user_data_dir("safety_checklist", "safety_checklist"))
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.token_file = self.data_dir / "auth_token.json"
        self._load_token()

    def _load_token(self):
        if not self.token_file.exists():
            return
        try:
            with open(self.token_file, 'r') as f:
                data = json.load(f)
            self.token = data.get('token')
            self.user = data.get('user')
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable token file {self.token_file}: {e}")

    def _save_token(self):
        with open(self.token_file, 'w') as f:
            json.dump({'token': self.token, 'user': self.user}, f)

    def login(self, username, password):
        try:
            resp = requests.post(f"{self.api_base_url}/api/auth/login", json={
                'username': username,
                'password': password
            }, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            return False, f"Connection error: {str(e)}"

        if resp.status_code == 200:
            data = resp.json()
            self.token = data['token']
            self.user = data['user']
            self._save_token()
            self.logger.info(f"Logged in as {self.user.get('email')}")
            return True, None
        return False, resp.json().get('error', 'Login failed')

    def register(self, username, email, password):
        try:
            resp = requests.post(f"{self.api_base_url}/api/auth/register", json={
                'username': username,
                'email': email,
                'password': password
            }, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            return False, f"Connection error: {str(e)}"

        if resp.status_code == 201:
            return True, None
        return False, resp.json().get('error', 'Registration failed')

    def logout(self):
        if self.token:
            try:
                requests.post(f"{self.api_base_url}/api/auth/logout", headers=self.get_headers(), timeout=5)
            except requests.exceptions.RequestException as e:
                # Local logout still proceeds
                self.logger.warning(f"Logout request failed: {e}")
        self.token = None
        self.user = None
        if self.token_file.exists():
            os.remove(self.token_file)

    def get_headers(self):
        if self.token:
            return {'Authorization': f'Bearer {self.token}'}
        return {}

    def is_authenticated(self):
        return self.token is not None

    def get_current_user(self):
        """Return {'id', 'email'} for the logged-in user, or None."""
        if not self.token or not self.user:
            return None
        return {'id': self.user.get('id'), 'email': self.user.get('email')}
