import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi import HTTPException

from observatory.routers import mcps as mcps_router
from observatory.services.mcps import NO_CONFIG_ERROR, McpService, mask_env_value

_CONFIG = {
    "mcpServers": {
        "search": {"url": "https://mcp.example.com/sse"},
        "github": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-github"],
            "env": {"GITHUB_TOKEN": "ghp_abcdefgh1234", "PIN": "1234"},
        },
        "Filesystem": {"command": "mcp-fs", "args": ["/home/dev"]},
    },
}


class McpServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)
        self.missing = self.root / "missing.json"
        self.path = self.root / "mcp.json"
        self.path.write_text(json.dumps(_CONFIG), encoding="utf-8")
        self.service = McpService([self.missing, self.path])

    def test_local_servers_sort_before_remote(self) -> None:
        listing = self.service.list_servers()
        self.assertIsNone(listing.error)
        self.assertEqual(listing.configPath, str(self.path))
        self.assertEqual([s.name for s in listing.servers], ["Filesystem", "github", "search"])
        self.assertEqual([s.type for s in listing.servers], ["local", "local", "remote"])

        github = listing.servers[1]
        self.assertEqual(github.command, "npx")
        self.assertTrue(github.hasEnv)
        self.assertEqual(github.envKeys, ["GITHUB_TOKEN", "PIN"])
        self.assertNotIn("envMasked", listing.servers[1].model_dump())

    def test_env_values_are_masked(self) -> None:
        self.assertEqual(mask_env_value("short"), "****")
        self.assertEqual(mask_env_value("12345678"), "****")
        self.assertEqual(mask_env_value("ghp_abcdefgh1234"), "****1234")

        detail = self.service.get_server("github")
        self.assertEqual(detail.envMasked, {"GITHUB_TOKEN": "****1234", "PIN": "****"})
        self.assertIsNone(self.service.get_server("nope"))

    def test_stats(self) -> None:
        stats = self.service.get_stats()
        self.assertEqual((stats.total, stats.local, stats.remote, stats.withEnv), (3, 2, 1, 1))
        self.assertEqual(stats.configPath, str(self.path))

    def test_missing_config_reports_error(self) -> None:
        service = McpService([self.missing])
        listing = service.list_servers()
        self.assertEqual(listing.servers, [])
        self.assertEqual(listing.error, NO_CONFIG_ERROR)
        self.assertIsNone(listing.configPath)
        self.assertEqual(service.get_stats().total, 0)

    def test_malformed_config_reports_error_with_path(self) -> None:
        self.path.write_text("{not json", encoding="utf-8")
        listing = self.service.list_servers()
        self.assertEqual(listing.servers, [])
        self.assertEqual(listing.configPath, str(self.path))
        self.assertTrue(listing.error)
        self.assertIsNone(self.service.get_server("github"))

        self.path.write_text(json.dumps({"mcpServers": ["github"]}), encoding="utf-8")
        self.assertTrue(self.service.list_servers().error)


class McpRouterTests(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "mcp.json"
        path.write_text(json.dumps(_CONFIG), encoding="utf-8")
        patcher = patch.object(mcps_router.config, "MCP_CONFIG_PATHS", [path])
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_endpoints(self) -> None:
        self.assertEqual(len(mcps_router.list_mcp_servers().servers), 3)
        self.assertEqual(mcps_router.get_mcp_stats().remote, 1)
        self.assertEqual(mcps_router.get_mcp_server("search").url, "https://mcp.example.com/sse")

    def test_unknown_server_is_404(self) -> None:
        with self.assertRaises(HTTPException) as ctx:
            mcps_router.get_mcp_server("nope")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.detail, 'Server "nope" not found')
