from __future__ import annotations

from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from depscout.cli import cli
from depscout.commands.index import _index_async, authenticate, build_file_index
from depscout.config import DepScoutConfig
from depscout.exceptions import ConfigError, GitHubError
from depscout.models import RepoFile
from depscout.utils.console import reconfigure_console
from depscout.utils.github import GitHubClient
from depscout.utils.http import HTTPClient
from depscout.utils.logger import disable_logging


@pytest.fixture(autouse=True)
def isolated_cli_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    # The group callback sets or pops NO_COLOR; setenv records it for restoring
    monkeypatch.setenv("NO_COLOR", "")
    monkeypatch.delenv("DEPSCOUT_CONFIG", raising=False)
    monkeypatch.setenv("DEPSCOUT_GITHUB_TOKEN", "ghp_test")
    yield
    disable_logging()
    reconfigure_console()


@pytest.fixture
def mock_github() -> MagicMock:
    github = MagicMock(spec=GitHubClient)
    github.get_authenticated_user = AsyncMock(return_value={"login": "octocat"})
    github.list_user_repos = AsyncMock(
        return_value=[{"name": "web", "owner": {"login": "octocat"}, "archived": False}]
    )
    github.get_contents = AsyncMock(
        return_value=[
            {
                "name": "package.json",
                "path": "package.json",
                "type": "file",
                "download_url": "https://raw.githubusercontent.com/octocat/web/main/package.json",
            }
        ]
    )
    return github


@pytest.mark.unit
class TestIndexCommand:
    def test_existing_index_is_kept(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("file_index.json").write_text("{}", encoding="utf-8")

            with patch("depscout.commands.index._index_async", new_callable=AsyncMock) as mock_index:
                result = runner.invoke(cli, ["index"])

            assert Path("file_index.json").read_text(encoding="utf-8") == "{}"

        assert result.exit_code == 0
        assert "already exists" in result.output
        mock_index.assert_not_called()

    @pytest.mark.parametrize("args", [["index"], ["index", "--force"]])
    def test_builds_index(self, args: list) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            if "--force" in args:
                Path("file_index.json").write_text("{}", encoding="utf-8")

            with patch(
                "depscout.commands.index._index_async",
                new_callable=AsyncMock,
                return_value=3,
            ) as mock_index:
                result = runner.invoke(cli, args)

        assert result.exit_code == 0
        assert "Indexed 3 repositories into file_index.json" in result.output
        mock_index.assert_awaited_once()

    def test_error_exits_one(self) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem():
            with patch(
                "depscout.commands.index._index_async",
                new_callable=AsyncMock,
                side_effect=GitHubError("Bad credentials", status_code=401),
            ):
                result = runner.invoke(cli, ["index"])

        assert result.exit_code == 1
        assert "[ERROR] Bad credentials" in result.output


@pytest.mark.unit
class TestIndexAsync:
    @pytest.mark.asyncio
    async def test_writes_index(self, tmp_path: Path, mock_github: MagicMock) -> None:
        config = DepScoutConfig(index_file=tmp_path / "file_index.json")

        with patch("depscout.commands.index.HTTPClient") as http_cls, patch(
            "depscout.commands.index.GitHubClient", return_value=mock_github
        ) as github_cls, patch("depscout.commands.index.print_message"):
            http_cls.return_value.__aenter__.return_value = MagicMock(spec=HTTPClient)
            count = await _index_async(config)

        assert count == 1
        assert github_cls.call_args.args[1] == "ghp_test"
        assert (tmp_path / "file_index.json").exists()


@pytest.mark.unit
class TestSharedHelpers:
    @pytest.mark.asyncio
    async def test_authenticate_greets(self, mock_github: MagicMock) -> None:
        with patch("depscout.commands.index.print_message") as mock_print:
            user = await authenticate(mock_github)

        assert user == {"login": "octocat"}
        mock_print.assert_called_once_with("Logged in as octocat", style="info")

    @pytest.mark.asyncio
    async def test_authenticate_quiet(self, mock_github: MagicMock) -> None:
        with patch("depscout.commands.index.print_message") as mock_print:
            await authenticate(mock_github, quiet=True)

        mock_print.assert_not_called()

    @pytest.mark.asyncio
    async def test_configured_username_wins(self, mock_github: MagicMock) -> None:
        config = DepScoutConfig(username="hubot")

        index = await build_file_index(config, mock_github, {"login": "octocat"}, quiet=True)

        mock_github.list_user_repos.assert_awaited_once_with("hubot")
        assert index == {
            "octocat/web": [
                RepoFile(
                    "package.json",
                    "package.json",
                    "file",
                    "https://raw.githubusercontent.com/octocat/web/main/package.json",
                )
            ]
        }

    @pytest.mark.asyncio
    async def test_falls_back_to_token_owner(self, mock_github: MagicMock) -> None:
        await build_file_index(DepScoutConfig(), mock_github, {"login": "octocat"}, quiet=True)

        mock_github.list_user_repos.assert_awaited_once_with("octocat")

    @pytest.mark.asyncio
    async def test_no_username(self, mock_github: MagicMock) -> None:
        with pytest.raises(ConfigError) as exc_info:
            await build_file_index(DepScoutConfig(), mock_github, {}, quiet=True)

        assert exc_info.value.option == "username"
        mock_github.list_user_repos.assert_not_called()
