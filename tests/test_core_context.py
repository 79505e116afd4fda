from hy2config.core.context import AppContext, get_context, init_context, reset_context
from hy2config.routing.presets import most_direct


def test_app_context_uses_custom_config_dir(tmp_path):
    config_dir = tmp_path / "config"
    ctx = AppContext(config_dir=config_dir)

    assert ctx.config_dir == config_dir
    assert config_dir.exists()
    assert ctx.tunnel_config_file == config_dir / "config.yaml"
    assert ctx.acl_file == config_dir / "acl.txt"


def test_active_profile_created_on_first_use(tmp_path):
    ctx = AppContext(config_dir=tmp_path)

    profile = ctx.active_profile

    assert ctx.profiles.active_id == profile.id
    assert ctx.save_all() is True
    assert (tmp_path / "profiles" / "profiles.json").exists()


def test_profiles_are_loaded_lazily(tmp_path):
    ctx = AppContext(config_dir=tmp_path)
    profile = ctx.profiles.create_profile(name="Saved")
    ctx.save_profiles()

    ctx2 = AppContext(config_dir=tmp_path)
    assert ctx2.save_profiles() is False
    assert ctx2.profiles.get_profile(profile.id) == profile


def test_write_tunnel_config_writes_config_and_acl(tmp_path):
    ctx = AppContext(config_dir=tmp_path)
    profile = ctx.profiles.create_profile(server="h:443", auth="a")
    profile = profile.with_route_rules(most_direct(profile.id))

    ok, errors = ctx.write_tunnel_config(profile)

    assert ok is True
    assert errors == []
    assert ctx.tunnel_config_file.read_text(encoding="utf-8").startswith("server: h:443\n")
    assert ctx.acl_file.read_text(encoding="utf-8").endswith("direct(all)\n")


def test_write_tunnel_config_refuses_invalid_profile(tmp_path):
    ctx = AppContext(config_dir=tmp_path)
    profile = ctx.profiles.create_profile(server="h:70000", auth="")

    ok, errors = ctx.write_tunnel_config(profile)

    assert ok is False
    assert len(errors) == 2
    assert not ctx.tunnel_config_file.exists()


def test_global_context(tmp_path):
    reset_context()
    ctx = init_context(config_dir=tmp_path)

    assert get_context() is ctx

    reset_context()
