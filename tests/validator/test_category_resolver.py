"""
Tests for category resolution and phantom category detection.
"""

from ledger.amounts import MAX_AMOUNT
from ledger.config import ProtocolConfig
from ledger.model import NFT, Capability
from ledger.violations import UnknownCategory
from validator.categories import Authority, resolve_categories, unknown_category_violations


class TestResolveCategories:
    
    def test_groups_by_category(self, builder, category_a, category_b):
        tx = (builder
              .add_input(category_a, amount=30)
              .add_input(category_a, amount=70, capability=Capability.NONE, commitment=b"\x01")
              .add_input(category_b, amount=5)
              .add_input()
              .add_output(category_a, amount=100, capability=Capability.NONE, commitment=b"\x01")
              .add_output(category_b, amount=5)
              .build())
        
        states = resolve_categories(tx)
        
        assert list(states) == [category_a, category_b]
        state_a = states[category_a]
        assert state_a.input_amount_sum == 100
        assert state_a.output_amount_sum == 100
        assert state_a.input_nfts == (NFT(Capability.NONE, b"\x01"),)
        assert state_a.output_nfts == (NFT(Capability.NONE, b"\x01"),)
        assert state_a.present_in_inputs
        assert not state_a.is_genesis
    
    def test_genesis_category(self, builder, genesis_txid):
        tx = builder.add_input().add_output(genesis_txid, amount=1000).build()
        
        state = resolve_categories(tx)[genesis_txid]
        
        assert state.is_genesis
        assert not state.present_in_inputs
        assert not state.is_phantom
        assert state.authority is Authority.GENESIS
    
    def test_genesis_outputs_share_one_state(self, builder, genesis_txid):
        tx = (builder
              .add_input()
              .add_output(genesis_txid, amount=10)
              .add_output(genesis_txid, capability=Capability.MINTING)
              .build())
        
        states = resolve_categories(tx)
        
        assert len(states) == 1
        assert states[genesis_txid].output_amount_sum == 10
    
    def test_phantom_category(self, builder, category_a):
        tx = builder.add_input().add_output(category_a, amount=1).build()
        
        states = resolve_categories(tx)
        
        assert states[category_a].is_phantom
        assert unknown_category_violations(states) == [UnknownCategory(category=category_a)]
    
    def test_input_only_category(self, builder, category_a):
        tx = builder.add_input(category_a, amount=10).add_output().build()
        
        state = resolve_categories(tx)[category_a]
        
        assert state.output_amount_sum == 0
        assert state.output_nfts == ()
        assert not state.is_phantom
    
    def test_overflowing_sum_is_none(self, builder, category_a):
        tx = (builder
              .add_input(category_a, amount=MAX_AMOUNT)
              .add_input(category_a, amount=1)
              .add_output(category_a, amount=1)
              .build())
        
        state = resolve_categories(tx)[category_a]
        
        assert state.input_amount_sum is None
        assert state.output_amount_sum == 1
        assert state.amount_overflow
    
    def test_configured_amount_ceiling(self, builder, category_a):
        tx = builder.add_input(category_a, amount=60).add_input(category_a, amount=60).build()
        config = ProtocolConfig.create(max_amount=100)
        
        assert resolve_categories(tx, config)[category_a].amount_overflow


class TestAuthority:
    
    def test_minting_outranks_mutable(self, builder, category_a):
        tx = (builder
              .add_input(category_a, capability=Capability.MUTABLE)
              .add_input(category_a, capability=Capability.MINTING)
              .build())
        
        assert resolve_categories(tx)[category_a].authority is Authority.MINTING
    
    def test_mutable(self, builder, category_a):
        tx = (builder
              .add_input(category_a, capability=Capability.NONE, commitment=b"\x01")
              .add_input(category_a, capability=Capability.MUTABLE)
              .build())
        
        assert resolve_categories(tx)[category_a].authority is Authority.MUTABLE
    
    def test_fungible_only_category_has_no_authority(self, builder, category_a):
        tx = builder.add_input(category_a, amount=10).build()
        
        state = resolve_categories(tx)[category_a]
        
        assert state.authority is Authority.NONE
        assert not state.authority.can_mint
