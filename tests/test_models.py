"""Tests for the document model: cloning, freeing and CVSS impact values."""

import math

from cvrfeval.cvss import CvssCategory, CvssImpact
from cvrfeval.enums import BranchType
from cvrfeval.models import Branch, Model, ProductName, ProductTree


class TestClone:
    def test_clone_is_deep_and_equal(self, sample_model) -> None:
        copy = sample_model.clone()
        assert copy == sample_model
        assert copy is not sample_model
        assert copy.tree is not sample_model.tree
        assert copy.vulnerabilities[0] is not sample_model.vulnerabilities[0]

    def test_clone_shares_no_lists(self, sample_model) -> None:
        copy = sample_model.clone()
        copy.vulnerabilities[0].product_statuses[0].product_ids.clear()
        copy.document.tracking.aliases.append("extra")
        assert len(sample_model.vulnerabilities[0].product_statuses[0].product_ids) == 3
        assert sample_model.document.tracking.aliases == ["RHSA-2017:1931-01"]

    def test_clone_keeps_tracking_fields_apart(self, sample_model) -> None:
        tracking = sample_model.document.tracking.clone()
        assert tracking.init_release_date == sample_model.document.tracking.init_release_date
        assert tracking.cur_release_date == sample_model.document.tracking.cur_release_date
        assert tracking.generator_date == sample_model.document.tracking.generator_date


class TestFree:
    def test_free_clears_owned_children(self, sample_model) -> None:
        statuses = sample_model.vulnerabilities[0].product_statuses
        sample_model.free()
        assert sample_model.vulnerabilities == []
        assert sample_model.tree.branches == []
        assert statuses == []

    def test_free_recurses_into_branches(self) -> None:
        leaf = Branch(type=BranchType.PRODUCT_NAME, name="leaf", product_name=ProductName("id"))
        family = Branch(type=BranchType.PRODUCT_FAMILY, subbranches=[leaf])
        tree = ProductTree(branches=[family])
        subbranches = family.subbranches
        tree.free()
        assert tree.branches == []
        assert subbranches == []


class TestModelDefaults:
    def test_new_model_is_empty(self) -> None:
        model = Model()
        assert model.tree.is_empty
        assert model.vulnerabilities == []
        assert model.identification is None

    def test_branch_leaf_by_type(self) -> None:
        assert Branch(type=BranchType.PRODUCT_VERSION).is_leaf
        assert Branch(type=BranchType.UNKNOWN).is_leaf
        assert not Branch(type=BranchType.PRODUCT_FAMILY).is_leaf


class TestCvssImpact:
    def test_scores_default_to_nan(self) -> None:
        impact = CvssImpact()
        for category in CvssCategory:
            assert math.isnan(impact.get_score(category))
            assert impact.score_text(category) is None

    def test_nan_scores_compare_equal(self) -> None:
        assert CvssImpact() == CvssImpact()
        assert CvssImpact(base_score=5.0) != CvssImpact()

    def test_set_score_text(self) -> None:
        impact = CvssImpact()
        assert impact.set_score_text(CvssCategory.ENVIRONMENTAL, "3.5")
        assert impact.environmental_score == 3.5
        assert impact.score_text(CvssCategory.ENVIRONMENTAL) == "3.5"

    def test_set_score_text_rejects_garbage(self) -> None:
        impact = CvssImpact()
        assert not impact.set_score_text(CvssCategory.BASE, "n/a")
        assert not impact.set_score_text(CvssCategory.BASE, None)
        assert math.isnan(impact.base_score)
