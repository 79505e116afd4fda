import json

from hy2config.db.profiles import ProfileManager
from hy2config.fmt.profile import ConnectionProfile
from hy2config.routing.presets import block_ads


def test_first_profile_becomes_active(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)

    p1 = mgr.create_profile(name="One")
    p2 = mgr.create_profile(name="Two")

    assert mgr.active_id == p1.id
    assert mgr.active_profile is p1
    assert mgr.get_profile(p2.id) is p2
    assert [p.name for p in mgr.list_profiles()] == ["One", "Two"]


def test_ensure_default_creates_profile_once(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)

    first = mgr.ensure_default()
    second = mgr.ensure_default()

    assert first is second
    assert len(mgr.profiles) == 1
    assert first.name == "Default"


def test_ensure_default_repairs_missing_active_id(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    profile = mgr.create_profile(name="Only")
    mgr._active_id = "gone"

    assert mgr.ensure_default() is profile
    assert mgr.active_id == profile.id


def test_cannot_remove_sole_or_active_profile(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    p1 = mgr.create_profile(name="One")

    assert mgr.remove_profile(p1.id) is False

    p2 = mgr.create_profile(name="Two")
    assert mgr.remove_profile(p1.id) is False
    assert mgr.remove_profile(p2.id) is True
    assert mgr.get_profile(p2.id) is None
    assert mgr.remove_profile("missing") is False


def test_duplicate_profile_becomes_active(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    p1 = mgr.create_profile(name="One", server="h:443")

    copy = mgr.duplicate_profile(p1.id)

    assert copy.id != p1.id
    assert copy.name == "One (copy)"
    assert mgr.active_id == copy.id
    assert len(mgr.profiles) == 2
    assert mgr.duplicate_profile("missing") is None


def test_update_and_select(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    p1 = mgr.create_profile(name="One")
    p2 = mgr.create_profile(name="Two")

    assert mgr.update_profile(p1.with_changes(server="new:1")) is True
    assert mgr.get_profile(p1.id).server == "new:1"
    assert mgr.update_profile(ConnectionProfile()) is False

    assert mgr.select(p2.id) is True
    assert mgr.active_id == p2.id
    assert mgr.select("missing") is False


def test_find_profile(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    a = mgr.add_profile(ConnectionProfile(id="aaaa-1", name="Alpha"))
    b = mgr.add_profile(ConnectionProfile(id="bbbb-2", name="Beta"))

    assert mgr.find_profile("aaaa-1") is a
    assert mgr.find_profile("2") is b
    assert mgr.find_profile("bbbb") is b
    assert mgr.find_profile("Alpha") is a
    assert mgr.find_profile("nothing") is None


def test_save_and_load(tmp_path):
    mgr = ProfileManager(profiles_dir=tmp_path)
    p1 = mgr.create_profile(name="One", server="h:443", auth="a")
    p1 = p1.with_route_rules(block_ads(p1.id))
    mgr.update_profile(p1)
    p2 = mgr.create_profile(name="Two")
    mgr.select(p2.id)

    assert mgr.save() is True
    assert json.loads((tmp_path / "meta.json").read_text())["active_id"] == p2.id

    mgr2 = ProfileManager(profiles_dir=tmp_path)
    assert mgr2.load() is True
    assert mgr2.active_id == p2.id
    assert mgr2.get_profile(p1.id) == p1
    assert mgr2.get_profile(p2.id) == p2


def test_load_corrupt_file_returns_false(tmp_path):
    (tmp_path / "profiles.json").write_text("{broken", encoding="utf-8")

    mgr = ProfileManager(profiles_dir=tmp_path)

    assert mgr.load() is False
    assert mgr.profiles == {}
