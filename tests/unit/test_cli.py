"""
命令行接口单元测试
"""

import json
import tarfile

from ruamel.yaml import YAML
from typer.testing import CliRunner

from ipkbuilder import __version__
from ipkbuilder.cli.main import app
from ipkbuilder.config import load_spec


runner = CliRunner()


def _write_config(path, data):
    yaml = YAML()
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f)
    return path


class TestVersion:
    """--version 测试"""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestExampleCommand:
    """example 命令测试"""

    def test_example_writes_loadable_spec(self, tmp_path):
        """测试生成的示例包描述可以被加载"""
        target = tmp_path / "package.yaml"

        result = runner.invoke(app, ["example", "-o", str(target)])

        assert result.exit_code == 0
        spec = load_spec(target)
        assert spec.control.is_inline
        assert spec.postinst.enabled
        assert spec.data_path == (tmp_path / "rootfs").resolve()


class TestBuildCommand:
    """build 命令测试"""

    def test_build(self, tmp_path, data_dir, control_file):
        """测试从描述文件构建"""
        config = _write_config(tmp_path / "package.yaml", {
            'control': {'source': 'path', 'path': control_file.name},
            'data_path': data_dir.name,
            'output_path': 'dist',
        })

        result = runner.invoke(app, ["build", "-c", str(config)])

        assert result.exit_code == 0, result.stdout
        package = tmp_path / "dist" / "outpackage.ipk"
        assert package.exists()
        with tarfile.open(package, 'r:gz') as archive:
            assert archive.getnames() == ["control.tar.gz", "data.tar.gz", "debian_binary"]

    def test_build_with_overrides(self, tmp_path, data_dir, control_file):
        """测试命令行覆盖输出目录和数据目录"""
        config = _write_config(tmp_path / "package.yaml", {
            'control': {'source': 'path', 'path': str(control_file)},
        })
        out = tmp_path / "override"

        result = runner.invoke(app, ["build", "-c", str(config), "-o", str(out), "-d", str(data_dir)])

        assert result.exit_code == 0, result.stdout
        assert (out / "outpackage.ipk").exists()

    def test_build_failure_exit_code(self, tmp_path):
        """测试构建失败时退出码为 1"""
        config = _write_config(tmp_path / "package.yaml", {'output_path': 'dist'})

        result = runner.invoke(app, ["build", "-c", str(config)])

        assert result.exit_code == 1
        assert not (tmp_path / "dist" / "outpackage.ipk").exists()

    def test_build_invalid_config(self, tmp_path):
        """测试描述文件验证失败"""
        config = _write_config(tmp_path / "package.yaml", {'compression_level': 12})

        result = runner.invoke(app, ["build", "-c", str(config)])

        assert result.exit_code == 1


class TestValidateCommand:
    """validate 命令测试"""

    def test_validate_ok(self, tmp_path, data_dir, control_file):
        """测试验证通过"""
        config = _write_config(tmp_path / "package.yaml", {
            'control': {'source': 'path', 'path': str(control_file)},
            'data_path': str(data_dir),
            'output_path': str(tmp_path / "dist"),
        })

        result = runner.invoke(app, ["validate", "-c", str(config)])

        assert result.exit_code == 0

    def test_validate_reports_preflight_problems(self, tmp_path):
        """测试报告构建前预检发现的问题"""
        config = _write_config(tmp_path / "package.yaml", {'package_filename': 'demo.ipk'})

        result = runner.invoke(app, ["validate", "-c", str(config), "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        locations = [error['loc'] for error in payload['errors']]
        assert ['output_path'] in locations
        assert ['data_path'] in locations
        assert ['control', 'path'] in locations

    def test_validate_schema_errors_json(self, tmp_path):
        """测试 schema 错误以 JSON 输出"""
        config = _write_config(tmp_path / "package.yaml", {'compression_level': 0})

        result = runner.invoke(app, ["validate", "-c", str(config), "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload['error_count'] >= 1
        assert payload['errors'][0]['loc'] == ['compression_level']

    def test_validate_missing_file(self, tmp_path):
        """测试描述文件不存在"""
        result = runner.invoke(app, ["validate", "-c", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1


class TestInspectCommand:
    """inspect 命令测试"""

    def test_inspect_json(self, spec):
        """测试以 JSON 输出安装包信息"""
        from ipkbuilder.build.builder import make_package

        package = make_package(spec)

        result = runner.invoke(app, ["inspect", str(package), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [entry['name'] for entry in payload['entries']] == [
            "control.tar.gz",
            "data.tar.gz",
            "debian_binary",
        ]

    def test_inspect_table(self, spec):
        """测试表格输出"""
        from ipkbuilder.build.builder import make_package

        package = make_package(spec)

        result = runner.invoke(app, ["inspect", str(package), "--files"])

        assert result.exit_code == 0
        assert "control.tar.gz" in result.stdout

    def test_inspect_missing(self, tmp_path):
        """测试安装包不存在"""
        result = runner.invoke(app, ["inspect", str(tmp_path / "missing.ipk")])

        assert result.exit_code == 1
